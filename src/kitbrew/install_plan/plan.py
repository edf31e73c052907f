"""
Install plans.

An InstallPlan captures the values resolved from a descriptor for one install
(which URL, which checksum, which binaries) and tracks how far the install got.
"""

import pathlib
from typing import List, Optional

from kitbrew.descriptor_models import PackageDescriptor


class InstallStatus:
    """Enumeration of install statuses."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class InstallPlan:
    """
    A plan to install a specific package.

    Captures all information needed to download, verify and install it.
    """

    def __init__(
        self,
        package: str,
        version: str,
        platform: str,
        url: str,
        checksum: str,
        binaries: List[str],
        status: str = InstallStatus.PENDING,
    ):
        """
        Initialize an install plan.

        Args:
            package: Package name
            version: Version being installed
            platform: Platform key of the chosen artifact
            url: URL to download from
            checksum: Expected SHA-256 digest of the artifact
            binaries: Files the install step copies
            status: Current install status
        """
        self.package = package
        self.version = version
        self.platform = platform
        self.url = url
        self.checksum = checksum
        self.binaries = binaries
        self.status = status
        self.archive_path: Optional[pathlib.Path] = None
        self.installed_paths: List[pathlib.Path] = []
        self.error_message: Optional[str] = None

    @classmethod
    def from_descriptor(
        cls, descriptor: PackageDescriptor, platform: Optional[str] = None
    ) -> "InstallPlan":
        """
        Resolve the descriptor's artifact into a pending plan.

        Raises:
            UnknownArtifactError: If the platform has no artifact
        """
        platform = platform or descriptor.default_platform
        url, checksum = descriptor.resolve_artifact(platform=platform)
        return cls(
            package=descriptor.name,
            version=descriptor.version,
            platform=platform,
            url=url,
            checksum=checksum,
            binaries=list(descriptor.install_step.binaries),
        )

    def is_installed(self) -> bool:
        """Check if the install completed successfully."""
        return self.status == InstallStatus.COMPLETED

    def mark_completed(self, installed_paths: List[pathlib.Path]) -> None:
        self.status = InstallStatus.COMPLETED
        self.installed_paths = list(installed_paths)
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        self.status = InstallStatus.FAILED
        self.installed_paths = []
        self.error_message = error_message

    def __repr__(self) -> str:
        return (
            f"InstallPlan(package={self.package}, version={self.version}, "
            f"status={self.status}, url={self.url})"
        )
