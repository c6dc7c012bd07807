"""Configuration parsing modules for ikvmbuild."""

from .build_config import ASSEMBLY_EXTENSION, BuildConfiguration, ConfigurationError
from .dependency_manifest import DependencyArtifact, ResolutionError, iter_manifest, load_manifest
from .ini_parser import IkvmConfig

__all__ = [
    "ASSEMBLY_EXTENSION",
    "BuildConfiguration",
    "ConfigurationError",
    "DependencyArtifact",
    "ResolutionError",
    "iter_manifest",
    "load_manifest",
    "IkvmConfig",
]
