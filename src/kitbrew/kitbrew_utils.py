"""
This file contains various utility functions like I/O operations, handling paths, etc.
"""

import hashlib
import logging
import os
import pathlib
import shutil
import sys
import tarfile
import zipfile

import httpx

from kitbrew.kitbrew_exceptions import DownloadError, ExtractionError
from kitbrew.kitbrew_logger import KitbrewLogger

ARCHIVE_SUFFIXES = {
    ".zip": "zip",
    ".tar": "tar",
    ".tar.gz": "gztar",
    ".tgz": "gztar",
    ".tar.bz2": "bztar",
    ".tar.xz": "xztar",
}


class PlatformUtils:
    """
    Host platform queries.
    """

    @staticmethod
    def is_64_bit() -> bool:
        return sys.maxsize > 2**32


class FileUtils:
    """
    Utility functions for file operations.
    """

    @staticmethod
    def download_file(
        logger: KitbrewLogger, client: httpx.Client, url: str, target_path: str
    ) -> None:
        """
        Downloads the file from the given URL to the given {target_path}

        Raises:
            DownloadError: On transport errors, a non-2xx response or a local write failure
        """
        partial_path = target_path + ".part"
        try:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            with client.stream("GET", url, follow_redirects=True) as response:
                response.raise_for_status()
                with open(partial_path, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
            os.replace(partial_path, target_path)
        except httpx.HTTPStatusError as e:
            FileUtils._remove_quietly(partial_path)
            raise DownloadError(
                f"Error downloading file {url}: HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, OSError) as e:
            FileUtils._remove_quietly(partial_path)
            raise DownloadError(f"Error downloading file {url}: {e}") from e

        logger.log(f"Downloaded {url} to {target_path}", logging.DEBUG)

    @staticmethod
    def compute_sha256(file_path: str) -> str:
        """
        Compute SHA256 checksum of a file.

        Args:
            file_path: Path to file

        Returns:
            SHA256 checksum as hex string (64 characters)
        """
        sha256_hash = hashlib.sha256()

        # Read file in chunks to handle large files
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256_hash.update(chunk)

        return sha256_hash.hexdigest()

    @staticmethod
    def archive_format(archive_path: str) -> str:
        """
        Returns the shutil archive format name for the given file name

        Raises:
            ExtractionError: If the suffix is not a known archive type
        """
        name = os.path.basename(archive_path).lower()
        # Longest suffix first
        for suffix in sorted(ARCHIVE_SUFFIXES, key=len, reverse=True):
            if name.endswith(suffix):
                return ARCHIVE_SUFFIXES[suffix]
        raise ExtractionError(f"Unsupported archive type: {archive_path}")

    @staticmethod
    def archive_stem(archive_path: str) -> str:
        name = os.path.basename(archive_path)
        for suffix in sorted(ARCHIVE_SUFFIXES, key=len, reverse=True):
            if name.lower().endswith(suffix):
                return name[: -len(suffix)]
        return name

    @staticmethod
    def extract_archive(archive_path: str, target_path: str) -> None:
        """
        Extracts the archive into {target_path}, replacing anything already there

        Raises:
            ExtractionError: If the archive type is unknown or the archive is corrupt
        """
        archive_format = FileUtils.archive_format(archive_path)
        try:
            if os.path.exists(target_path):
                shutil.rmtree(target_path)
            os.makedirs(target_path)
            if archive_format == "zip":
                with zipfile.ZipFile(archive_path) as zf:
                    zf.extractall(target_path)
            else:
                with tarfile.open(archive_path) as tf:
                    if hasattr(tarfile, "data_filter"):
                        tf.extractall(target_path, filter="data")
                    else:
                        tf.extractall(target_path)
        except (zipfile.BadZipFile, tarfile.TarError, OSError) as e:
            shutil.rmtree(target_path, ignore_errors=True)
            raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e

    @staticmethod
    def _remove_quietly(path: str) -> None:
        try:
            pathlib.Path(path).unlink(missing_ok=True)
        except OSError:
            pass
