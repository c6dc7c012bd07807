"""
Command-line interface for ikvmbuild.

This module provides the `ikvmbuild` CLI tool for building a .NET DLL
from resolved Java dependencies.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ikvmbuild import __version__
from ikvmbuild.build import BuildOrchestrator, PlatformDetector
from ikvmbuild.cli_utils import ErrorFormatter, PathValidator, PropertyParser, setup_logging
from ikvmbuild.config import BuildConfiguration, IkvmConfig, iter_manifest
from ikvmbuild.errors import IkvmBuildError

DEFAULT_CONFIG_NAME = "ikvm.ini"
DEFAULT_MANIFEST_NAME = "dependencies.json"


@dataclass
class BuildArgs:
    """Arguments shared by the build and show-command commands."""

    project_dir: Path
    config: Optional[Path] = None
    manifest: Optional[Path] = None
    properties: List[str] = field(default_factory=list)
    clean: bool = False
    verbose: bool = False
    log_file: Optional[Path] = None

    @property
    def config_path(self) -> Path:
        return self.config or self.project_dir / DEFAULT_CONFIG_NAME

    @property
    def manifest_path(self) -> Path:
        return self.manifest or self.project_dir / DEFAULT_MANIFEST_NAME


def load_build_configuration(args: BuildArgs) -> BuildConfiguration:
    """Load ikvm.ini and apply -D property overrides."""
    overrides = PropertyParser.parse_properties(args.properties)
    return IkvmConfig(
        args.config_path, overrides=overrides, project_dir=args.project_dir
    ).to_build_configuration()


def build_command(args: BuildArgs) -> None:
    """Build the IKVM DLL for a project.

    Examples:
        ikvmbuild build                                # Build current directory
        ikvmbuild build samples/game                  # Build specific project
        ikvmbuild build -D compile-code-only=true     # Override an ikvm.ini option
        ikvmbuild build --clean                       # Clear extracted classes first
    """
    print(f"ikvmbuild v{__version__}")
    print()

    try:
        config = load_build_configuration(args)

        if args.verbose:
            print(f"Building project: {args.project_dir}")
            print(f"Configuration: {args.config_path}")
            print(f"Dependencies: {args.manifest_path}")
            print(f"Platform: {PlatformDetector.get_platform_info()}")
            print()

        orchestrator = BuildOrchestrator(verbose=args.verbose)
        result = orchestrator.build(
            config,
            iter_manifest(args.manifest_path),
            clean=args.clean,
        )

        if result.skipped:
            ErrorFormatter.print_warning(result.message)
        else:
            ErrorFormatter.print_success("Build successful!")
        print()
        print(f"Assembly: {result.artifact_path}")
        for copied in result.copied_files:
            print(f"Copied: {copied}")
        print(f"Build time: {result.build_time:.2f}s")
        sys.exit(0)

    except IkvmBuildError as e:
        ErrorFormatter.handle_build_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def show_command(args: BuildArgs) -> None:
    """Print the ikvmc command a build would run, without running it."""
    try:
        config = load_build_configuration(args)
        invocation, _ = BuildOrchestrator().prepare_command(
            config, iter_manifest(args.manifest_path)
        )
        print(invocation)
        sys.exit(0)

    except IkvmBuildError as e:
        ErrorFormatter.handle_build_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help=f"Configuration file (default: PROJECT_DIR/{DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "-m",
        "--manifest",
        type=Path,
        default=None,
        help=f"Resolved dependency manifest (default: PROJECT_DIR/{DEFAULT_MANIFEST_NAME})",
    )
    parser.add_argument(
        "-D",
        "--define",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override an [ikvm] option (e.g. -D compiler-install-path=/opt/ikvm)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a debug log to this file",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ikvmbuild",
        description="ikvmbuild - compile Java dependencies into a .NET DLL with IKVM",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ikvmbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser(
        "build",
        help="Build the IKVM DLL",
    )
    _add_project_arguments(build_parser)
    build_parser.add_argument(
        "--clean",
        action="store_true",
        help="Remove extracted class files before building",
    )

    show_parser = subparsers.add_parser(
        "show-command",
        help="Print the ikvmc command without running it",
    )
    _add_project_arguments(show_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """ikvmbuild - IKVM build step for Java projects."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    PathValidator.validate_project_dir(parsed_args.project_dir)
    setup_logging(verbose=parsed_args.verbose, log_file=parsed_args.log_file)

    args = BuildArgs(
        project_dir=parsed_args.project_dir,
        config=parsed_args.config,
        manifest=parsed_args.manifest,
        properties=parsed_args.properties,
        clean=getattr(parsed_args, "clean", False),
        verbose=parsed_args.verbose,
        log_file=parsed_args.log_file,
    )

    if parsed_args.command == "build":
        build_command(args)
    elif parsed_args.command == "show-command":
        show_command(args)


if __name__ == "__main__":
    main()
