"""
Platform runtime interface.

The descriptor never talks to the host directly: the architecture query, the
download and checksum verification, archive extraction and the location of
the bin directory are all provided by a PlatformRuntime. Real installs use
LocalRuntime; tests inject a fake.
"""

import pathlib
from abc import ABC, abstractmethod

from kitbrew.descriptor_models import PlatformRequirement


class PlatformRuntime(ABC):
    """
    Capabilities a package descriptor needs from its host.
    """

    @abstractmethod
    def is_supported_architecture(self, requirement: PlatformRequirement) -> bool:
        """
        Check whether the host CPU architecture satisfies the requirement.

        Args:
            requirement: The descriptor's platform requirement

        Returns:
            True if installation may proceed
        """
        ...

    @abstractmethod
    def download_and_verify(self, url: str, checksum: str) -> pathlib.Path:
        """
        Download the artifact and verify its SHA-256 digest.

        Args:
            url: Artifact URL
            checksum: Expected SHA-256 digest (64 lowercase hex characters)

        Returns:
            Path of the verified archive

        Raises:
            DownloadError: If the artifact cannot be fetched
            ChecksumMismatchError: If the digest does not match
        """
        ...

    @abstractmethod
    def extract(self, archive_path: pathlib.Path) -> pathlib.Path:
        """
        Extract the archive.

        Returns:
            Directory holding the extracted contents

        Raises:
            ExtractionError: If the archive cannot be extracted
        """
        ...

    @abstractmethod
    def bin_directory(self) -> pathlib.Path:
        """Installation binary directory."""
        ...
