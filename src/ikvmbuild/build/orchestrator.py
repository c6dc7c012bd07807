"""
Build orchestration for ikvmbuild.

This module runs the whole IKVM build step:
1. Prepare the output directory and register the artifact path
2. Skip (optionally leaving a stub) when IKVM is not configured
3. Check the IKVM installation
4. Classify the resolved dependencies
5. Assemble the ikvmc command
6. Extract class files (code-only mode)
7. Run ikvmc and check its output
8. Copy auxiliary DLLs into the output directory
"""

import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..config.build_config import BuildConfiguration, ConfigurationError
from ..config.dependency_manifest import DependencyArtifact
from .archive_utils import ArchiveExtractor
from .artifact_publisher import ArtifactCallback, ArtifactPublisher
from .command_builder import CommandBuilder, CommandInvocation
from .compilation_executor import CompilationExecutor, ExecutionResult
from .dependency_classifier import ClassifiedDependencies, DependencyClassifier
from .stdlib_resolver import StandardLibraryResolver

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a complete IKVM build step."""

    success: bool
    artifact_path: Optional[Path]
    build_time: float
    message: str
    skipped: bool = False
    invocation: Optional[CommandInvocation] = None
    execution: Optional[ExecutionResult] = None
    copied_files: List[Path] = field(default_factory=list)


class BuildOrchestrator:
    """
    Orchestrates the IKVM build step.

    Every fatal condition is raised as an ``IkvmBuildError`` subclass; a
    returned BuildResult always describes a successful (or deliberately
    skipped) build.

    Example usage:
        orchestrator = BuildOrchestrator(verbose=True)
        result = orchestrator.build(config, load_manifest(Path("dependencies.json")))
        print(f"Assembly: {result.artifact_path}")
    """

    def __init__(
        self,
        verbose: bool = False,
        executor: Optional[CompilationExecutor] = None,
        on_artifact: Optional[ArtifactCallback] = None
    ):
        """
        Initialize build orchestrator.

        Args:
            verbose: Show progress bars during extraction
            executor: Executor to run ikvmc (default built from the config)
            on_artifact: Called with the artifact path once it is registered
        """
        self.verbose = verbose
        self.executor = executor
        self.on_artifact = on_artifact

    def build(
        self,
        config: BuildConfiguration,
        dependencies: Iterable[DependencyArtifact],
        clean: bool = False
    ) -> BuildResult:
        """
        Execute the build step.

        Args:
            config: Build configuration
            dependencies: Resolved dependencies in resolution order
            clean: Remove the class extraction directory before building

        Returns:
            BuildResult for a successful or skipped build

        Raises:
            ConfigurationError: If the IKVM installation is invalid
            ResolutionError: If the dependencies cannot be read
            ExtractionError: If a jar cannot be unpacked
            InvocationError: If ikvmc cannot be launched
            CompilationError: If ikvmc fails
            WarningEscalationError: If ikvmc warns while warnings are errors
            ArtifactPublishError: If an output file cannot be written or copied
        """
        start_time = time.time()

        publisher = ArtifactPublisher(config, on_artifact=self.on_artifact)
        artifact_path = publisher.prepare()

        if not config.has_compiler:
            return self._skip_build(config, publisher, start_time)

        self.check_installation(config)

        invocation, classified = self.prepare_command(config, dependencies)

        if clean and config.scratch_dir.exists():
            logger.info(f"Removing class directory {config.scratch_dir}")
            shutil.rmtree(config.scratch_dir)

        if config.compile_code_only:
            config.scratch_dir.mkdir(parents=True, exist_ok=True)
            extractor = ArchiveExtractor(show_progress=self.verbose)
            extractor.extract_classes(classified.compile_unit_paths, config.scratch_dir)

        executor = self.executor or CompilationExecutor(
            escalate_warnings=config.escalate_warnings
        )
        execution = executor.execute(invocation)

        copied = publisher.publish(classified.references)

        return BuildResult(
            success=True,
            artifact_path=artifact_path,
            build_time=time.time() - start_time,
            message=f"Built {artifact_path.name}",
            invocation=invocation,
            execution=execution,
            copied_files=copied,
        )

    def prepare_command(
        self,
        config: BuildConfiguration,
        dependencies: Iterable[DependencyArtifact]
    ) -> Tuple[CommandInvocation, ClassifiedDependencies]:
        """
        Classify dependencies and assemble the ikvmc command without running it.

        Returns:
            Tuple of (invocation, classified dependencies)
        """
        classified = DependencyClassifier.classify(dependencies)
        logger.debug(
            f"{len(classified.compile_units)} jar(s) to compile, "
            + f"{len(classified.references)} DLL dependency(ies) to reference"
        )
        invocation = CommandBuilder(config).build(classified)
        return invocation, classified

    @staticmethod
    def check_installation(config: BuildConfiguration) -> None:
        """
        Verify the IKVM installation before building.

        Raises:
            ConfigurationError: If the install path or ikvmc is missing
        """
        install_path = Path(config.compiler_install_path)
        if not install_path.is_dir():
            raise ConfigurationError(
                f"compiler-install-path refers to non- or non-existent directory: {install_path}"
            )

        executable = config.resolve_compiler_executable()
        if not executable.exists():
            raise ConfigurationError(f"Unable to find ikvmc at: {executable}")

        if not StandardLibraryResolver(config.base_library_path).is_valid:
            logger.warning(
                f"base-library-path is not a directory: {config.base_library_path}. "
                + "Library references will be passed to ikvmc unresolved."
            )

    @staticmethod
    def _skip_build(
        config: BuildConfiguration,
        publisher: ArtifactPublisher,
        start_time: float
    ) -> BuildResult:
        if config.create_stub_on_missing_tool:
            logger.info("compiler-install-path is not set. Creating stub IKVM artifact.")
            artifact = publisher.create_stub()
            message = f"Created stub artifact {artifact.name}"
        else:
            logger.warning("compiler-install-path is not set. Skipping IKVM build.")
            message = "IKVM build skipped"

        return BuildResult(
            success=True,
            artifact_path=config.artifact_path,
            build_time=time.time() - start_time,
            message=message,
            skipped=True,
        )
