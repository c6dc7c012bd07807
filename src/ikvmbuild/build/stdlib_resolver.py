"""Standard Library Path Utilities.

Resolves .NET library assembly names (``mscorlib.dll``, ``OpenTK.dll``)
against the configured base-library directory.
"""

from pathlib import Path
from typing import Tuple, Union

# Always referenced, in this order, ahead of any user reference
MANDATORY_LIBRARIES: Tuple[str, ...] = ("mscorlib.dll", "System.dll", "System.Core.dll")


class StandardLibraryResolver:
    """Resolves assembly names to paths in the base-library directory."""

    def __init__(self, base_library_dir: Union[str, Path]):
        """Initialize resolver.

        Args:
            base_library_dir: Directory containing the profile assemblies
        """
        self.base_library_dir = Path(base_library_dir)

    @property
    def is_valid(self) -> bool:
        return self.base_library_dir.is_dir()

    def resolve(self, name: str) -> str:
        """Resolve an assembly name to the path handed to ikvmc.

        Absolute names are returned unchanged. Relative names are joined to
        the base-library directory when it exists; otherwise the name is
        passed through as-is and ikvmc reports any failure.

        Args:
            name: Assembly file name or path

        Returns:
            Path string for a ``-r:`` argument
        """
        if Path(name).is_absolute():
            return name
        if self.is_valid:
            return str((self.base_library_dir / name).absolute())
        return name

    def mandatory_references(self) -> Tuple[str, ...]:
        """Resolved paths of the mandatory base libraries, in fixed order."""
        return tuple(self.resolve(name) for name in MANDATORY_LIBRARIES)
