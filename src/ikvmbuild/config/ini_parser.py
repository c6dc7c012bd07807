"""
ikvm.ini configuration parser.

This module reads the IKVM build configuration from an INI file and turns
it into a ``BuildConfiguration``.

Example ikvm.ini:
    [ikvm]
    compiler-install-path = /opt/ikvm
    extra-references =
        OpenTK.dll
    copy-files = bin/IKVM.Runtime.dll
    compile-code-only = true

    [build]
    output-directory = target
    final-name = mygame-1.0
"""

import configparser
import os
import shlex
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .build_config import (
    DEFAULT_BASE_LIBRARY_PATH,
    DEFAULT_RUNTIME_LAUNCHER,
    BuildConfiguration,
    ConfigurationError,
)

IKVM_SECTION = "ikvm"
BUILD_SECTION = "build"

# Environment fallback for compiler-install-path
IKVM_PATH_ENV = "IKVM_PATH"

BOOLEAN_OPTIONS = {
    "copy-reference-dependencies": "copy_reference_dependencies",
    "create-stub-on-missing-tool": "create_stub_on_missing_tool",
    "compile-code-only": "compile_code_only",
    "escalate-warnings": "escalate_warnings",
    "force-alternate-runtime": "force_alternate_runtime",
}

KNOWN_OPTIONS = set(BOOLEAN_OPTIONS) | {
    "compiler-install-path",
    "compiler-executable",
    "base-library-path",
    "extra-arguments",
    "extra-references",
    "copy-files",
    "runtime-launcher",
}


class IkvmConfig:
    """
    Parser for ikvm.ini configuration files.

    Values in the ``[ikvm]`` section may be overridden by property
    definitions (``-D key=value`` on the command line). Relative paths in
    the ``[build]`` section are resolved against the project directory.
    A key given without a value (``compile-code-only``) enables that flag.

    Usage:
        config = IkvmConfig(Path("ikvm.ini"), overrides={"compile-code-only": "true"})
        build_config = config.to_build_configuration()
    """

    def __init__(
        self,
        ini_path: Path,
        overrides: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        project_dir: Optional[Path] = None
    ):
        """
        Initialize the parser with an ikvm.ini file.

        Args:
            ini_path: Path to the ikvm.ini file
            overrides: Property overrides for the [ikvm] section
            environ: Environment to consult for IKVM_PATH (default os.environ)
            project_dir: Base for relative [build] paths (default: the INI
                file's directory)

        Raises:
            ConfigurationError: If the file doesn't exist, cannot be parsed
                or names an unknown [ikvm] option
        """
        self.ini_path = Path(ini_path)
        self.project_dir = Path(project_dir) if project_dir is not None else self.ini_path.parent
        self.overrides = dict(overrides or {})
        self.environ = os.environ if environ is None else environ

        if not self.ini_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Failed to parse {self.ini_path}: {e}") from e

        self._check_known_options(self.overrides, "-D")
        if self.config.has_section(IKVM_SECTION):
            # [DEFAULT] keys show up in every section; only check the section's own
            own_keys = set(self.config.options(IKVM_SECTION)) - set(self.config.defaults())
            self._check_known_options(own_keys, str(self.ini_path))

    def get_ikvm_options(self) -> Dict[str, str]:
        """
        Get the merged [ikvm] options.

        A boolean option listed without a value reads as "true", the same
        as a bare ``-D`` property.

        Returns:
            Dictionary of option values, overrides applied last
        """
        options: Dict[str, str] = {}
        if self.config.has_section(IKVM_SECTION):
            try:
                for key in self.config[IKVM_SECTION]:
                    value = self.config[IKVM_SECTION][key]
                    if value is None and key in BOOLEAN_OPTIONS:
                        value = "true"
                    options[key] = (value or "").strip()
            except configparser.Error as e:
                raise ConfigurationError(f"Failed to read [{IKVM_SECTION}]: {e}") from e
        options.update({k: v.strip() for k, v in self.overrides.items()})
        return options

    def get_output_dir(self) -> Path:
        """Get the build output directory (default: target in the project directory)."""
        value = self._get_build_option("output-directory") or "target"
        path = Path(value)
        if not path.is_absolute():
            path = self.project_dir / path
        return path.absolute()

    def get_final_name(self) -> str:
        """
        Get the artifact base name.

        Raises:
            ConfigurationError: If [build] final-name is missing
        """
        final_name = self._get_build_option("final-name")
        if not final_name:
            raise ConfigurationError(
                f"[{BUILD_SECTION}] final-name is required in {self.ini_path}"
            )
        return final_name

    def get_extra_arguments(self) -> List[str]:
        """
        Parse extra ikvmc arguments.

        Example:
            For extra-arguments = -debug "-version:1.0.0.0"
            Returns: ['-debug', '-version:1.0.0.0']
        """
        value = self.get_ikvm_options().get("extra-arguments", "")
        if not value:
            return []
        try:
            return shlex.split(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid extra-arguments '{value}': {e}") from e

    def get_extra_references(self) -> List[str]:
        return self._get_list("extra-references")

    def get_copy_files(self) -> List[str]:
        return self._get_list("copy-files")

    def to_build_configuration(self) -> BuildConfiguration:
        """
        Build the immutable configuration record.

        Returns:
            BuildConfiguration for this project

        Raises:
            ConfigurationError: If a required value is missing or a value
                cannot be parsed
        """
        options = self.get_ikvm_options()

        install_path = options.get("compiler-install-path") or self.environ.get(IKVM_PATH_ENV)
        executable = options.get("compiler-executable")
        base_library = options.get("base-library-path")

        flags = {
            field: self._parse_bool(option, options.get(option))
            for option, field in BOOLEAN_OPTIONS.items()
        }

        return BuildConfiguration(
            output_dir=self.get_output_dir(),
            final_name=self.get_final_name(),
            compiler_install_path=Path(install_path) if install_path else None,
            compiler_executable=Path(executable) if executable else None,
            base_library_path=Path(base_library) if base_library else DEFAULT_BASE_LIBRARY_PATH,
            extra_arguments=tuple(self.get_extra_arguments()),
            extra_references=tuple(self.get_extra_references()),
            copy_files=tuple(self.get_copy_files()),
            runtime_launcher=options.get("runtime-launcher") or DEFAULT_RUNTIME_LAUNCHER,
            **flags,
        )

    def _get_build_option(self, key: str) -> Optional[str]:
        if not self.config.has_section(BUILD_SECTION):
            return None
        try:
            value = self.config[BUILD_SECTION].get(key)
        except configparser.Error as e:
            raise ConfigurationError(f"Failed to read [{BUILD_SECTION}] {key}: {e}") from e
        return value.strip() if value else None

    @staticmethod
    def _check_known_options(keys, source: str) -> None:
        unknown = set(keys) - KNOWN_OPTIONS
        if unknown:
            raise ConfigurationError(
                f"Unknown ikvm option(s) in {source}: {', '.join(sorted(unknown))}"
            )

    def _get_list(self, key: str) -> List[str]:
        # Split on newlines and commas, strip whitespace, filter empty
        value = self.get_ikvm_options().get(key, "")
        items = []
        for line in value.split("\n"):
            for item in line.split(","):
                item = item.strip()
                if item:
                    items.append(item)
        return items

    @staticmethod
    def _parse_bool(key: str, value: Optional[str]) -> bool:
        if value is None or value == "":
            return False
        lowered = value.lower()
        if lowered not in configparser.ConfigParser.BOOLEAN_STATES:
            raise ConfigurationError(f"Option '{key}' expects a boolean, got '{value}'")
        return configparser.ConfigParser.BOOLEAN_STATES[lowered]
