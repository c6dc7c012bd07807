"""
Build system components for ikvmbuild.

This module provides the IKVM build step:
- Dependency classification (jars vs. DLL references)
- Standard library resolution
- ikvmc command assembly
- Class extraction for code-only builds
- ikvmc execution and warning checks
- Artifact publishing
"""

from .archive_utils import ArchiveExtractor, ExtractionError, is_class_entry
from .artifact_publisher import ArtifactPublisher, ArtifactPublishError
from .command_builder import CommandBuilder, CommandInvocation
from .compilation_executor import (
    CompilationError,
    CompilationExecutor,
    ExecutionResult,
    InvocationError,
    WarningEscalationError,
)
from .dependency_classifier import ClassifiedDependencies, DependencyClassifier
from .orchestrator import BuildOrchestrator, BuildResult
from .platform_utils import PlatformDetector
from .stdlib_resolver import MANDATORY_LIBRARIES, StandardLibraryResolver

__all__ = [
    "ArchiveExtractor",
    "ExtractionError",
    "is_class_entry",
    "ArtifactPublisher",
    "ArtifactPublishError",
    "CommandBuilder",
    "CommandInvocation",
    "CompilationError",
    "CompilationExecutor",
    "ExecutionResult",
    "InvocationError",
    "WarningEscalationError",
    "ClassifiedDependencies",
    "DependencyClassifier",
    "BuildOrchestrator",
    "BuildResult",
    "PlatformDetector",
    "MANDATORY_LIBRARIES",
    "StandardLibraryResolver",
]
