"""ikvmc Command Builder.

This module assembles the single ikvmc invocation for a build.

Design:
    - Fixed flags first, then user arguments with duplicates of the fixed
      flags and any ``-out:`` removed
    - One output argument pointing at the deterministic artifact path
    - References in fixed precedence: mandatory base libraries, user
      references, then ``dll`` dependencies
    - Inputs last: either the jar paths or one ``-recurse:`` glob over the
      extracted class directory
"""

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..config.build_config import BuildConfiguration
from .dependency_classifier import ClassifiedDependencies
from .platform_utils import PlatformDetector
from .stdlib_resolver import MANDATORY_LIBRARIES, StandardLibraryResolver

logger = logging.getLogger(__name__)

FIXED_ARGUMENTS = ("-nostdlib", "-target:library")
OUTPUT_PREFIX = "-out:"
REFERENCE_PREFIX = "-r:"
RECURSE_PREFIX = "-recurse:"
CLASS_SUFFIX = ".class"

# Assembly search path honoured by Mono
RUNTIME_SEARCH_PATH_ENV = "MONO_PATH"


@dataclass
class CommandInvocation:
    """An argument vector plus environment overrides for one ikvmc run."""

    argv: List[str]
    env: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        env = " ".join(f"{k}={shlex.quote(v)}" for k, v in self.env.items())
        cmd = " ".join(shlex.quote(arg) for arg in self.argv)
        return f"{env} {cmd}" if env else cmd


class CommandBuilder:
    """Builds the ikvmc command line from configuration and dependencies.

    Example:
        builder = CommandBuilder(config)
        invocation = builder.build(DependencyClassifier.classify(artifacts))
    """

    def __init__(
        self,
        config: BuildConfiguration,
        direct_execution: Optional[bool] = None
    ):
        """Initialize command builder.

        Args:
            config: Build configuration
            direct_execution: Run ikvmc without the runtime launcher. Defaults
                to the platform launch policy.
        """
        self.config = config
        if direct_execution is None:
            direct_execution = PlatformDetector.use_direct_execution(
                config.force_alternate_runtime
            )
        self.direct_execution = direct_execution
        self.resolver = StandardLibraryResolver(config.base_library_path)

    def build(self, dependencies: ClassifiedDependencies) -> CommandInvocation:
        """Assemble the ikvmc invocation.

        Args:
            dependencies: Classified dependencies

        Returns:
            CommandInvocation ready for the compilation executor
        """
        argv = self.build_head()
        argv.extend(FIXED_ARGUMENTS)
        argv.extend(self.filter_user_arguments(self.config.extra_arguments))
        argv.append(f"{OUTPUT_PREFIX}{self.config.artifact_path}")
        argv.extend(f"{REFERENCE_PREFIX}{ref}" for ref in self.build_references(dependencies))
        argv.extend(self.build_inputs(dependencies))
        return CommandInvocation(argv=argv, env=self.build_env())

    def build_head(self) -> List[str]:
        """Executable (and launcher, when needed) that starts the command."""
        executable = str(self.config.resolve_compiler_executable())
        if self.direct_execution:
            return [executable]
        return [self.config.runtime_launcher, executable]

    @staticmethod
    def filter_user_arguments(arguments) -> List[str]:
        """Drop user arguments that repeat a fixed flag or set the output.

        Args:
            arguments: User-supplied ikvmc arguments

        Returns:
            Remaining arguments in their original order
        """
        kept = []
        for arg in arguments:
            if arg in FIXED_ARGUMENTS:
                continue
            if arg.startswith(OUTPUT_PREFIX):
                logger.warning(
                    f"Ignoring '{arg}': don't specify -out:file directly. Set "
                    + "output-directory and final-name in the [build] section instead."
                )
                continue
            kept.append(arg)
        return kept

    def build_references(self, dependencies: ClassifiedDependencies) -> List[str]:
        """Reference paths in precedence order.

        Mandatory base libraries come first, then user references (minus
        the mandatory ones), then ``dll`` dependencies.
        """
        references = list(self.resolver.mandatory_references())
        for name in self.config.extra_references:
            if name in MANDATORY_LIBRARIES:
                continue
            references.append(self.resolver.resolve(name))
        references.extend(str(path) for path in dependencies.reference_paths)
        return references

    def build_inputs(self, dependencies: ClassifiedDependencies) -> List[str]:
        """Compilation inputs: jar paths, or the class glob in code-only mode."""
        if self.config.compile_code_only:
            return [self.recurse_argument(self.config.scratch_dir)]
        return [str(path) for path in dependencies.compile_unit_paths]

    @staticmethod
    def recurse_argument(class_dir: Path) -> str:
        return f"{RECURSE_PREFIX}{class_dir}{os.sep}*{CLASS_SUFFIX}"

    def build_env(self) -> Dict[str, str]:
        """Environment overrides for the launched process."""
        if self.direct_execution or not self.resolver.is_valid:
            return {}
        return {RUNTIME_SEARCH_PATH_ENV: str(self.resolver.base_library_dir.absolute())}
