"""
Shared fixtures for kitbrew tests.
"""

import hashlib
import pathlib
import zipfile
from typing import Dict, List, Optional, Tuple

import pytest

from kitbrew.descriptor_models import PackageDescriptor, PlatformRequirement
from kitbrew.kitbrew_exceptions import ChecksumMismatchError
from kitbrew.kitbrew_logger import KitbrewLogger
from kitbrew.kitbrew_utils import FileUtils
from kitbrew.platform_runtime import PlatformRuntime

KITCLI_SHA256 = "228e9423813950beb149b8890f8bb9911424a1dd49664686948b340b50dc3a22"
KITCLI_URL = (
    "https://github.com/prateekgogia/kubernetes-iteration-toolkit/releases/download/"
    "v0.0.9/kitcli_v0.0.9_darwin_amd64.zip"
)


def make_zip(path: pathlib.Path, files: Dict[str, bytes]) -> pathlib.Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return path


def sha256_of(path: pathlib.Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


class FakeRuntime(PlatformRuntime):
    """
    In-memory stand-in for the package manager runtime.

    Serves a prepared archive for every URL and records each call.
    """

    def __init__(
        self,
        root: pathlib.Path,
        archive: Optional[pathlib.Path] = None,
        supported: bool = True,
        fail_checksum: bool = False,
    ):
        self.root = root
        self.archive = archive
        self.supported = supported
        self.fail_checksum = fail_checksum
        self.calls: List[Tuple] = []

    def is_supported_architecture(self, requirement: PlatformRequirement) -> bool:
        self.calls.append(("is_supported_architecture", requirement))
        return self.supported

    def download_and_verify(self, url: str, checksum: str) -> pathlib.Path:
        self.calls.append(("download_and_verify", url, checksum))
        if self.fail_checksum:
            raise ChecksumMismatchError(url, checksum, "0" * 64)
        return self.archive

    def extract(self, archive_path: pathlib.Path) -> pathlib.Path:
        self.calls.append(("extract", archive_path))
        target = self.root / "extracted"
        FileUtils.extract_archive(str(archive_path), str(target))
        return target

    def bin_directory(self) -> pathlib.Path:
        return self.root / "bin"

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def logger():
    return KitbrewLogger()


@pytest.fixture
def descriptor_data():
    """Raw dict of a two-platform descriptor."""
    return {
        "_description": "Example tool",
        "name": "exampletool",
        "homepage": "https://example.com/exampletool",
        "version": "v1.2.3",
        "platformRequirement": "64-bit",
        "urlTemplate": "https://example.com/releases/{version}/exampletool_{version}_{platform}.zip",
        "defaultPlatform": "linux_amd64",
        "artifacts": {
            "linux_amd64": {"sha256": "a" * 64},
            "darwin_arm64": {"sha256": "b" * 64},
        },
        "install": {"binaries": ["exampletool"]},
    }


@pytest.fixture
def kitcli_archive(tmp_path):
    return make_zip(tmp_path / "kitcli_v0.0.9_darwin_amd64.zip", {"kitcli": b"#!/bin/sh\necho kitcli\n"})


@pytest.fixture
def fake_runtime(tmp_path, kitcli_archive):
    return FakeRuntime(tmp_path / "runtime", kitcli_archive)


@pytest.fixture
def install_calls(monkeypatch):
    """Records every call of PackageDescriptor.install."""
    calls = []
    original = PackageDescriptor.install

    def spy(self, extracted_path, bin_directory):
        calls.append((extracted_path, bin_directory))
        return original(self, extracted_path, bin_directory)

    monkeypatch.setattr(PackageDescriptor, "install", spy)
    return calls
