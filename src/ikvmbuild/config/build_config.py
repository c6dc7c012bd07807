"""
Build configuration record.

This module defines the immutable configuration for one IKVM build step.
It is built once (usually by ``IkvmConfig``) and handed to the build
orchestrator; nothing downstream mutates it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..errors import IkvmBuildError

# Where MonoTouch installs its profile assemblies.
DEFAULT_BASE_LIBRARY_PATH = Path("/Developer/MonoTouch/usr/lib/mono/2.1")

DEFAULT_RUNTIME_LAUNCHER = "mono"

# Extension of the produced managed library.
ASSEMBLY_EXTENSION = ".dll"


class ConfigurationError(IkvmBuildError):
    """Raised when the build configuration is missing or invalid."""

    pass


@dataclass(frozen=True)
class BuildConfiguration:
    """
    Resolved configuration for a single IKVM invocation.

    Attributes:
        output_dir: Build output directory (created if missing)
        final_name: Base name of the produced assembly (no extension)
        compiler_install_path: IKVM installation root; None means "not
            installed" and triggers the stub/skip path
        compiler_executable: Explicit ikvmc path (default derived from
            the install root)
        base_library_path: Directory holding mscorlib.dll and friends
        extra_arguments: Additional ikvmc arguments, in order
        extra_references: Additional DLLs to reference, absolute or
            relative to ``base_library_path``
        copy_files: DLLs to copy into ``output_dir``, absolute or relative
            to ``compiler_install_path``
        copy_reference_dependencies: Copy ``dll`` dependencies into
            ``output_dir`` without their version
        create_stub_on_missing_tool: Create an empty artifact when IKVM is
            not configured
        compile_code_only: Only feed ``.class`` entries to ikvmc
        escalate_warnings: Fail the build when ikvmc reports warnings
        force_alternate_runtime: Launch ikvmc via the runtime launcher
            even on Windows
        runtime_launcher: Launcher used when not executing ikvmc directly
    """

    output_dir: Path
    final_name: str
    compiler_install_path: Optional[Path] = None
    compiler_executable: Optional[Path] = None
    base_library_path: Path = DEFAULT_BASE_LIBRARY_PATH
    extra_arguments: Tuple[str, ...] = ()
    extra_references: Tuple[str, ...] = ()
    copy_files: Tuple[str, ...] = ()
    copy_reference_dependencies: bool = False
    create_stub_on_missing_tool: bool = False
    compile_code_only: bool = False
    escalate_warnings: bool = False
    force_alternate_runtime: bool = False
    runtime_launcher: str = DEFAULT_RUNTIME_LAUNCHER

    def __post_init__(self):
        if not self.final_name:
            raise ConfigurationError("final-name must not be empty")
        # Accept any sequence from callers but store tuples
        for name in ("extra_arguments", "extra_references", "copy_files"):
            value = getattr(self, name)
            if value is None:
                value = ()
            object.__setattr__(self, name, tuple(value))

    @property
    def artifact_path(self) -> Path:
        """Deterministic path of the produced assembly."""
        return Path(self.output_dir).absolute() / f"{self.final_name}{ASSEMBLY_EXTENSION}"

    @property
    def scratch_dir(self) -> Path:
        """Directory receiving extracted class files in code-only mode."""
        return Path(self.output_dir).absolute() / "dll-classes"

    @property
    def has_compiler(self) -> bool:
        return self.compiler_install_path is not None

    def resolve_compiler_executable(self) -> Path:
        """
        Get the ikvmc executable path.

        Returns:
            The configured executable, or ``<install>/bin/ikvmc.exe``

        Raises:
            ConfigurationError: If neither the executable nor the install
                path is configured
        """
        if self.compiler_executable is not None:
            return Path(self.compiler_executable).absolute()
        if self.compiler_install_path is None:
            raise ConfigurationError("compiler-install-path is not set")
        return (Path(self.compiler_install_path) / "bin" / "ikvmc.exe").absolute()
