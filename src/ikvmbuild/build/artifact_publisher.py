"""Artifact Publisher.

This module prepares the output directory, registers the produced assembly
and copies auxiliary DLLs next to it.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..config.build_config import BuildConfiguration
from ..config.dependency_manifest import DependencyArtifact
from ..errors import IkvmBuildError

logger = logging.getLogger(__name__)

ArtifactCallback = Callable[[Path], None]


class ArtifactPublishError(IkvmBuildError, OSError):
    """Raised when an artifact or auxiliary file cannot be written or copied."""

    pass


class ArtifactPublisher:
    """Publishes the ikvmc output and its companion DLLs.

    The artifact path is registered before ikvmc runs so that callers always
    have a path to inspect, even when the build is skipped or fails.
    """

    def __init__(
        self,
        config: BuildConfiguration,
        on_artifact: Optional[ArtifactCallback] = None
    ):
        """Initialize artifact publisher.

        Args:
            config: Build configuration
            on_artifact: Called with the artifact path when it is registered
        """
        self.config = config
        self.on_artifact = on_artifact
        self.artifact_path: Optional[Path] = None

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir).absolute()

    def prepare(self) -> Path:
        """Create the output directory and register the artifact path.

        Returns:
            The registered artifact path
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactPublishError(
                f"Unable to create output directory {self.output_dir}: {e}"
            ) from e

        self.artifact_path = self.config.artifact_path
        if self.on_artifact is not None:
            self.on_artifact(self.artifact_path)
        return self.artifact_path

    def create_stub(self) -> Path:
        """Create a zero-length artifact file.

        Raises:
            ArtifactPublishError: If the stub cannot be created
        """
        artifact = self.config.artifact_path
        try:
            artifact.write_bytes(b"")
        except OSError as e:
            raise ArtifactPublishError(f"Unable to create stub artifact file: {artifact}") from e
        return artifact

    def resolve_copy_source(self, name: str) -> Path:
        """Locate a configured copy-file entry.

        Tries the name as given, then relative to the IKVM install root.

        Raises:
            ArtifactPublishError: If neither location exists
        """
        candidate = Path(name)
        if candidate.exists():
            return candidate
        install_root = self.config.compiler_install_path
        fallback = Path(install_root) / name if install_root is not None else candidate
        if fallback.exists():
            return fallback
        raise ArtifactPublishError(f"{name} does not exist (nor does {fallback})")

    def copy_files(self, names: Iterable[str]) -> List[Path]:
        """Copy configured DLLs into the output directory under their own name."""
        copied = []
        for name in names:
            source = self.resolve_copy_source(name)
            copied.append(self._copy(source, self.output_dir / source.name))
        return copied

    def copy_reference_dependencies(self, references: Iterable[DependencyArtifact]) -> List[Path]:
        """Copy ``dll`` dependencies into the output directory without version info."""
        copied = []
        for artifact in references:
            dest = self.output_dir / artifact.unversioned_file_name
            copied.append(self._copy(Path(artifact.path), dest))
        return copied

    def publish(self, references: Iterable[DependencyArtifact]) -> List[Path]:
        """Copy every auxiliary file after a successful build.

        Args:
            references: Reference-assembly dependencies in classifier order

        Returns:
            Paths of all copied files
        """
        copied = self.copy_files(self.config.copy_files)
        if self.config.copy_reference_dependencies:
            copied.extend(self.copy_reference_dependencies(references))
        return copied

    def _copy(self, source: Path, dest: Path) -> Path:
        try:
            shutil.copyfile(source, dest)
        except OSError as e:
            raise ArtifactPublishError(
                f"Failed to copy {source} into {self.output_dir}: {e}"
            ) from e
        logger.debug(f"Copied {source} -> {dest}")
        return dest
