"""
Tests for LocalRuntime and FileUtils.
"""

import hashlib
import io
import pathlib
import tarfile

import httpx
import pytest

from conftest import make_zip
from kitbrew.descriptor_models import PlatformRequirement
from kitbrew.kitbrew_config import KitbrewConfig
from kitbrew.kitbrew_exceptions import ChecksumMismatchError, DownloadError, ExtractionError
from kitbrew.kitbrew_utils import FileUtils, PlatformUtils
from kitbrew.platform_runtime import LocalRuntime

ARCHIVE_URL = "https://example.com/releases/v1.2.3/exampletool_v1.2.3_linux_amd64.zip"


@pytest.fixture
def archive_bytes(tmp_path):
    path = make_zip(tmp_path / "source.zip", {"exampletool": b"tool"})
    return path.read_bytes()


@pytest.fixture
def config(tmp_path):
    return KitbrewConfig(prefix=str(tmp_path / "prefix"), cache_directory=str(tmp_path / "cache"))


def make_runtime(config, logger, handler):
    return LocalRuntime(config, logger, client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestArchitecture:
    def test_any_is_always_supported(self, config, logger, monkeypatch):
        monkeypatch.setattr(PlatformUtils, "is_64_bit", staticmethod(lambda: False))
        runtime = LocalRuntime(config, logger)
        assert runtime.is_supported_architecture(PlatformRequirement.ANY)
        runtime.close()

    @pytest.mark.parametrize("is_64_bit", [True, False])
    def test_64_bit_requirement(self, config, logger, monkeypatch, is_64_bit):
        monkeypatch.setattr(PlatformUtils, "is_64_bit", staticmethod(lambda: is_64_bit))
        with LocalRuntime(config, logger) as runtime:
            assert runtime.is_supported_architecture(PlatformRequirement.SIXTY_FOUR_BIT) is is_64_bit


class TestDownloadAndVerify:
    def test_verified_download(self, config, logger, archive_bytes):
        runtime = make_runtime(config, logger, lambda request: httpx.Response(200, content=archive_bytes))

        path = runtime.download_and_verify(ARCHIVE_URL, hashlib.sha256(archive_bytes).hexdigest())

        assert path.name == "exampletool_v1.2.3_linux_amd64.zip"
        assert path.read_bytes() == archive_bytes

    def test_follows_redirects(self, config, logger, archive_bytes):
        def handler(request):
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"Location": "https://objects.example.net/blob"})
            return httpx.Response(200, content=archive_bytes)

        runtime = make_runtime(config, logger, handler)
        path = runtime.download_and_verify(ARCHIVE_URL, hashlib.sha256(archive_bytes).hexdigest())
        assert path.read_bytes() == archive_bytes

    def test_checksum_mismatch(self, config, logger, archive_bytes):
        runtime = make_runtime(config, logger, lambda request: httpx.Response(200, content=archive_bytes))

        with pytest.raises(ChecksumMismatchError) as exc_info:
            runtime.download_and_verify(ARCHIVE_URL, "0" * 64)

        assert exc_info.value.expected == "0" * 64
        assert exc_info.value.actual == hashlib.sha256(archive_bytes).hexdigest()
        assert not any((pathlib.Path(config.cache_directory) / "downloads").iterdir())

    def test_http_error(self, config, logger):
        runtime = make_runtime(config, logger, lambda request: httpx.Response(404))
        with pytest.raises(DownloadError, match="404"):
            runtime.download_and_verify(ARCHIVE_URL, "0" * 64)

    def test_transport_error(self, config, logger):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        runtime = make_runtime(config, logger, handler)
        with pytest.raises(DownloadError, match="connection refused"):
            runtime.download_and_verify(ARCHIVE_URL, "0" * 64)

    def test_cache_directory_is_a_file(self, tmp_path, logger, archive_bytes):
        blocker = tmp_path / "cache"
        blocker.write_text("not a directory")
        config = KitbrewConfig(prefix=str(tmp_path / "prefix"), cache_directory=str(blocker))
        runtime = make_runtime(config, logger, lambda request: httpx.Response(200, content=archive_bytes))

        with pytest.raises(DownloadError, match="Error downloading file"):
            runtime.download_and_verify(ARCHIVE_URL, hashlib.sha256(archive_bytes).hexdigest())

        assert blocker.read_text() == "not a directory"


class TestExtract:
    def test_zip(self, config, logger, tmp_path):
        archive = make_zip(tmp_path / "exampletool_v1.2.3_linux_amd64.zip", {"exampletool": b"tool"})
        with LocalRuntime(config, logger) as runtime:
            extracted = runtime.extract(archive)
        assert extracted.name == "exampletool_v1.2.3_linux_amd64"
        assert (extracted / "exampletool").read_bytes() == b"tool"

    def test_tar_gz(self, config, logger, tmp_path):
        archive = tmp_path / "exampletool.tar.gz"
        with tarfile.open(archive, "w:gz") as tf:
            info = tarfile.TarInfo("exampletool")
            info.size = 4
            tf.addfile(info, io.BytesIO(b"tool"))

        with LocalRuntime(config, logger) as runtime:
            extracted = runtime.extract(archive)
        assert extracted.name == "exampletool"
        assert (extracted / "exampletool").read_bytes() == b"tool"

    def test_extract_replaces_stale_contents(self, config, logger, tmp_path):
        archive = make_zip(tmp_path / "exampletool.zip", {"exampletool": b"tool"})
        with LocalRuntime(config, logger) as runtime:
            first = runtime.extract(archive)
            (first / "stale").write_text("old")
            second = runtime.extract(archive)
        assert not (second / "stale").exists()

    def test_unknown_archive_type(self, config, logger, tmp_path):
        archive = tmp_path / "exampletool.rar"
        archive.write_bytes(b"x")
        with LocalRuntime(config, logger) as runtime:
            with pytest.raises(ExtractionError, match="Unsupported"):
                runtime.extract(archive)

    def test_corrupt_archive(self, config, logger, tmp_path):
        archive = tmp_path / "exampletool.zip"
        archive.write_bytes(b"not a zip")
        with LocalRuntime(config, logger) as runtime:
            with pytest.raises(ExtractionError):
                runtime.extract(archive)

    def test_cache_directory_is_a_file(self, tmp_path, logger):
        archive = make_zip(tmp_path / "exampletool.zip", {"exampletool": b"tool"})
        blocker = tmp_path / "cache"
        blocker.write_text("not a directory")
        config = KitbrewConfig(prefix=str(tmp_path / "prefix"), cache_directory=str(blocker))

        with LocalRuntime(config, logger) as runtime:
            with pytest.raises(ExtractionError, match="Failed to extract"):
                runtime.extract(archive)


def test_bin_directory(config, logger, tmp_path):
    with LocalRuntime(config, logger) as runtime:
        assert runtime.bin_directory() == tmp_path / "prefix" / "bin"


def test_compute_sha256(tmp_path):
    path = tmp_path / "data"
    path.write_bytes(b"kitcli")
    assert FileUtils.compute_sha256(str(path)) == hashlib.sha256(b"kitcli").hexdigest()
