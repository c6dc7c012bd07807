"""Dependency Classifier.

Splits the resolved dependency list into the Java archives that ikvmc
compiles and the .NET assemblies it only references.

Design:
    - Test-scoped artifacts are dropped
    - ``dll`` artifacts become references, everything else is compiled
    - Resolution order is preserved within each group
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from ..config.dependency_manifest import DependencyArtifact, ResolutionError
from ..interrupt_utils import reraise_as

logger = logging.getLogger(__name__)


@dataclass
class ClassifiedDependencies:
    """Result of classifying the resolved dependencies."""

    compile_units: List[DependencyArtifact] = field(default_factory=list)
    references: List[DependencyArtifact] = field(default_factory=list)

    @property
    def compile_unit_paths(self) -> List[Path]:
        return [Path(a.path).absolute() for a in self.compile_units]

    @property
    def reference_paths(self) -> List[Path]:
        return [Path(a.path).absolute() for a in self.references]


class DependencyClassifier:
    """Partitions resolved artifacts into compile units and references."""

    @staticmethod
    def classify(artifacts: Iterable[DependencyArtifact]) -> ClassifiedDependencies:
        """Classify resolved dependencies.

        Args:
            artifacts: Resolved artifacts in resolution order. May be a lazy
                iterable supplied by the resolver.

        Returns:
            ClassifiedDependencies with both groups in input order

        Raises:
            ResolutionError: If iterating the resolver's artifacts fails
        """
        result = ClassifiedDependencies()
        with reraise_as(
            ResolutionError, "Failed to resolve dependencies", passthrough=(ResolutionError,)
        ):
            for artifact in artifacts:
                logger.debug(f"Considering artifact [{artifact.identity}]")
                if artifact.is_test_scoped:
                    continue
                if artifact.is_reference_assembly:
                    result.references.append(artifact)
                else:
                    result.compile_units.append(artifact)

        return result
