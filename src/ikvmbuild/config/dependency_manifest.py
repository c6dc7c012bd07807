"""
Resolved dependency manifest.

Dependency resolution happens outside ikvmbuild. The resolver writes its
result as a JSON list, one object per artifact, in resolution order:

    [
        {"group": "com.threerings", "name": "playn-core", "version": "1.0",
         "path": "/repo/playn-core-1.0.jar", "type": "jar", "scope": "compile"},
        {"group": "org.opentk", "name": "opentk", "version": "1.0",
         "path": "/repo/opentk-1.0.dll", "type": "dll", "scope": "compile"}
    ]
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..errors import IkvmBuildError

SCOPE_COMPILE = "compile"
SCOPE_TEST = "test"

# Packaging type of dependencies that are already .NET assemblies
REFERENCE_ASSEMBLY_TYPE = "dll"


class ResolutionError(IkvmBuildError):
    """Raised when the resolved dependency list cannot be obtained."""

    pass


@dataclass(frozen=True)
class DependencyArtifact:
    """A resolved dependency artifact."""

    group: str
    name: str
    path: Path
    type: str = "jar"
    scope: str = SCOPE_COMPILE
    version: Optional[str] = None

    @property
    def identity(self) -> str:
        return f"{self.group}:{self.name}"

    @property
    def is_test_scoped(self) -> bool:
        return self.scope == SCOPE_TEST

    @property
    def is_reference_assembly(self) -> bool:
        return self.type == REFERENCE_ASSEMBLY_TYPE

    @property
    def unversioned_file_name(self) -> str:
        """File name without version information, e.g. ``opentk.dll``."""
        return f"{self.name}.{self.type}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyArtifact":
        """
        Create an artifact from a manifest entry.

        Raises:
            ResolutionError: If a required key is missing
        """
        missing = [key for key in ("group", "name", "path") if not data.get(key)]
        if missing:
            raise ResolutionError(
                f"Dependency entry is missing {', '.join(missing)}: {data}"
            )
        return cls(
            group=str(data["group"]),
            name=str(data["name"]),
            path=Path(data["path"]),
            type=str(data.get("type") or "jar"),
            scope=str(data.get("scope") or SCOPE_COMPILE),
            version=data.get("version"),
        )


def load_manifest(manifest_path: Path) -> List[DependencyArtifact]:
    """
    Load resolved dependencies from a JSON manifest.

    Args:
        manifest_path: Path to the manifest written by the resolver

    Returns:
        Artifacts in resolution order

    Raises:
        ResolutionError: If the manifest is missing or malformed
    """
    manifest_path = Path(manifest_path)
    if not manifest_path.exists():
        raise ResolutionError(f"Dependency manifest not found: {manifest_path}")

    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ResolutionError(f"Failed to read dependency manifest {manifest_path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("dependencies", [])
    if not isinstance(data, list):
        raise ResolutionError(
            f"Dependency manifest {manifest_path} must contain a list of artifacts"
        )

    artifacts = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ResolutionError(f"Invalid dependency entry in {manifest_path}: {entry!r}")
        artifacts.append(DependencyArtifact.from_dict(entry))
    return artifacts


def iter_manifest(manifest_path: Path) -> Iterator[DependencyArtifact]:
    """Lazily load a manifest; nothing is read until iteration starts."""
    yield from load_manifest(manifest_path)
