"""Platform Detection Utilities.

ikvmc.exe is a .NET executable. It runs natively on Windows; everywhere
else it has to be launched through a .NET runtime such as Mono.
"""

import platform


class PlatformDetector:
    """Detects the host platform for the ikvmc launch policy."""

    @staticmethod
    def is_windows() -> bool:
        return platform.system().lower() == "windows"

    @staticmethod
    def use_direct_execution(force_alternate_runtime: bool = False) -> bool:
        """Decide whether ikvmc can be executed directly.

        Args:
            force_alternate_runtime: Always go through the runtime launcher

        Returns:
            True on Windows unless the runtime launcher is forced
        """
        return not force_alternate_runtime and PlatformDetector.is_windows()

    @staticmethod
    def get_platform_info() -> dict:
        return {
            "system": platform.system(),
            "machine": platform.machine(),
            "direct_execution": PlatformDetector.use_direct_execution(),
        }
