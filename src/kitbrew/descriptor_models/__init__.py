"""
Package descriptor models.

This package provides the Pydantic data model for parsing, validating and
serializing package descriptors, and the operations the installer runs on
them (platform check, artifact resolution, install step).
"""

from .package_descriptor import (
    ArtifactRef,
    ArtifactSource,
    InstallStep,
    PackageDescriptor,
    PlatformRequirement,
)

__all__ = [
    "ArtifactRef",
    "ArtifactSource",
    "InstallStep",
    "PackageDescriptor",
    "PlatformRequirement",
]
