"""
Local platform runtime.

Downloads with httpx into the configured cache directory, verifies the
SHA-256 digest, extracts with FileUtils and installs under <prefix>/bin.
"""

import logging
import os
import pathlib
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from kitbrew.descriptor_models import PlatformRequirement
from kitbrew.kitbrew_config import KitbrewConfig
from kitbrew.kitbrew_exceptions import ChecksumMismatchError, DownloadError
from kitbrew.kitbrew_logger import KitbrewLogger
from kitbrew.kitbrew_utils import FileUtils, PlatformUtils
from kitbrew.platform_runtime.runtime import PlatformRuntime


class LocalRuntime(PlatformRuntime):
    """
    Runtime backed by the local machine.

    Example:
        with LocalRuntime(KitbrewConfig(), KitbrewLogger()) as runtime:
            archive = runtime.download_and_verify(url, checksum)
    """

    def __init__(
        self,
        config: KitbrewConfig,
        logger: KitbrewLogger,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            config: Provides the prefix, cache directory and HTTP timeout
            logger: Logger for progress and error messages
            client: HTTP client to use; one is created (and owned) if omitted
        """
        self.config = config
        self.logger = logger
        self._owns_client = client is None
        self.client = client if client is not None else httpx.Client(timeout=config.http_timeout)

    def __enter__(self) -> "LocalRuntime":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def is_supported_architecture(self, requirement: PlatformRequirement) -> bool:
        if requirement == PlatformRequirement.ANY:
            return True
        return PlatformUtils.is_64_bit()

    def download_and_verify(self, url: str, checksum: str) -> pathlib.Path:
        filename = os.path.basename(unquote(urlparse(url).path))
        if not filename:
            raise DownloadError(f"Cannot derive a file name from {url}")

        target = pathlib.Path(self.config.cache_directory) / "downloads" / filename
        self.logger.log(f"Downloading {url}", logging.INFO)
        FileUtils.download_file(self.logger, self.client, url, str(target))

        try:
            actual = FileUtils.compute_sha256(str(target))
        except OSError as e:
            raise DownloadError(f"Cannot read downloaded file {target}: {e}") from e
        if actual != checksum.lower():
            target.unlink(missing_ok=True)
            self.logger.log(f"Checksum mismatch for {url}", logging.ERROR)
            raise ChecksumMismatchError(url, checksum, actual)

        self.logger.log(f"Verified SHA256 of {filename}", logging.INFO)
        return target

    def extract(self, archive_path: pathlib.Path) -> pathlib.Path:
        target = (
            pathlib.Path(self.config.cache_directory)
            / "extracted"
            / FileUtils.archive_stem(str(archive_path))
        )
        FileUtils.extract_archive(str(archive_path), str(target))
        self.logger.log(f"Extracted {archive_path} to {target}", logging.DEBUG)
        return target

    def bin_directory(self) -> pathlib.Path:
        return self.config.bin_directory
