"""
Pydantic data model for package descriptors.

A descriptor declares exactly one installable artifact per platform: where to
download it (derived from a URL template and the version), which SHA-256
digest it must match, the host requirement that must hold before anything is
downloaded, and which files the install step copies into the bin directory.
"""

import json
import os
import pathlib
import re
import shutil
import stat
import string
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, NamedTuple, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from kitbrew.kitbrew_exceptions import (
    MalformedDescriptorError,
    MissingFileError,
    UnknownArtifactError,
    VersionDriftError,
    WriteFailureError,
)

if TYPE_CHECKING:
    from kitbrew.platform_runtime import PlatformRuntime

VERSION_PLACEHOLDER = "{version}"
PLATFORM_PLACEHOLDER = "{platform}"

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
_VERSION_RE = re.compile(r"^v?\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.-]+)?$")
_PLATFORM_KEY_RE = re.compile(r"^[a-z0-9]+_[a-z0-9]+$")
_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")
# A version token sitting in its own URL segment: /v1.2.3/, _1.2.3_, -v1.2.3.zip
_LITERAL_VERSION_RE = re.compile(r"(?:^|(?<=[/_-]))v?\d+\.\d+\.\d+(?=$|[/_-]|\.[A-Za-z])")


class PlatformRequirement(str, Enum):
    """Host architecture predicate checked before any download."""

    SIXTY_FOUR_BIT = "64-bit"
    ANY = "any"


class ArtifactRef(NamedTuple):
    """The (url, checksum) pair handed to the downloader."""

    url: str
    checksum: str


class ArtifactSource(BaseModel):
    """
    Checksum of the release archive for one platform.
    """

    sha256: str = Field(..., description="SHA256 checksum (64 hex chars)")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("sha256")
    @classmethod
    def validate_sha256(cls, v: str) -> str:
        """Validate SHA256 is 64 hex characters."""
        v = v.strip().lower()
        if len(v) != 64:
            raise ValueError(f"SHA256 must be 64 hex characters, got {len(v)}")
        if not _SHA256_RE.match(v):
            raise ValueError("SHA256 must contain only hex characters")
        return v


class InstallStep(BaseModel):
    """Files copied from the extracted artifact into the bin directory."""

    binaries: List[str] = Field(..., min_length=1, description="File names to install")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("binaries")
    @classmethod
    def validate_binaries(cls, v: List[str]) -> List[str]:
        for binary in v:
            if not binary or binary in (".", "..") or "/" in binary or "\\" in binary:
                raise ValueError(f"Binary must be a plain file name, got {binary!r}")
        if len(set(v)) != len(v):
            raise ValueError("Binaries must be unique")
        return v


class PackageDescriptor(BaseModel):
    """
    A declarative record telling a package manager how to fetch, verify,
    and install one software artifact.

    Structure:
    {
      "_description": "...",
      "name": "kitcli",
      "homepage": "...",
      "version": "v0.0.9",
      "platformRequirement": "64-bit",
      "urlTemplate": ".../download/{version}/kitcli_{version}_{platform}.zip",
      "defaultPlatform": "darwin_amd64",
      "artifacts": {"darwin_amd64": {"sha256": "..."}},
      "install": {"binaries": ["kitcli"]}
    }

    The version is stated once; every URL is derived from the template.
    """

    name: str = Field(..., description="Package identifier")
    description: Optional[str] = Field(None, alias="_description", description="Description")
    homepage: str = Field(..., description="Project homepage, informational only")
    version: str = Field(..., description="Release version, e.g. v0.0.9")
    platform_requirement: PlatformRequirement = Field(
        PlatformRequirement.SIXTY_FOUR_BIT, alias="platformRequirement"
    )
    url_template: str = Field(
        ..., alias="urlTemplate", description="Artifact URL with {version} and {platform}"
    )
    default_platform: str = Field(..., alias="defaultPlatform")
    artifacts: Dict[str, ArtifactSource] = Field(..., min_length=1)
    install_step: InstallStep = Field(..., alias="install")

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _NAME_RE.match(v):
            raise ValueError(f"Invalid package name: {v!r}")
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not _VERSION_RE.match(v):
            raise ValueError(f"Version must look like v1.2.3 or 1.2.3, got {v!r}")
        return v

    @field_validator("url_template")
    @classmethod
    def validate_url_template(cls, v: str) -> str:
        try:
            placeholders = {
                field for _, field, _, _ in string.Formatter().parse(v) if field is not None
            }
        except ValueError as e:
            raise ValueError(f"Malformed URL template {v!r}: {e}")

        unknown = placeholders - {"version", "platform"}
        if unknown:
            raise ValueError(f"Unknown placeholders in URL template: {sorted(unknown)}")
        if VERSION_PLACEHOLDER not in v:
            raise ValueError(f"URL template must contain {VERSION_PLACEHOLDER}")

        parsed = urlparse(v.replace(VERSION_PLACEHOLDER, "x").replace(PLATFORM_PLACEHOLDER, "x"))
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"URL template must be an http(s) URL, got {v!r}")
        return v

    @field_validator("artifacts")
    @classmethod
    def validate_platform_keys(cls, v: Dict[str, ArtifactSource]) -> Dict[str, ArtifactSource]:
        for key in v:
            if not _PLATFORM_KEY_RE.match(key):
                raise ValueError(f"Platform key must look like <os>_<arch>, got {key!r}")
        return v

    @model_validator(mode="after")
    def validate_consistency(self) -> "PackageDescriptor":
        literal = self._literal_version_in_template()
        if literal is not None:
            raise VersionDriftError(literal, self.url_template)
        if self.default_platform not in self.artifacts:
            raise ValueError(
                f"defaultPlatform {self.default_platform!r} has no artifact; "
                f"declared: {sorted(self.artifacts)}"
            )
        if len(self.artifacts) > 1 and PLATFORM_PLACEHOLDER not in self.url_template:
            raise ValueError(
                f"URL template must contain {PLATFORM_PLACEHOLDER} when several "
                "platforms are declared"
            )
        return self

    def _literal_version_in_template(self) -> Optional[str]:
        # Placeholders removed, only the path and query are searched; hosts may be IPs
        stripped = self.url_template.replace(VERSION_PLACEHOLDER, "").replace(
            PLATFORM_PLACEHOLDER, ""
        )
        parsed = urlparse(stripped)
        for part in (parsed.path, parsed.query):
            match = _LITERAL_VERSION_RE.search(part)
            if match:
                return match.group(0)
        return None

    def check_platform(self, runtime: "PlatformRuntime") -> bool:
        """Whether the host satisfies the platform requirement. No side effects."""
        return runtime.is_supported_architecture(self.platform_requirement)

    def artifact_url(self, version: Optional[str] = None, platform: Optional[str] = None) -> str:
        """
        Derive the artifact URL from the template.

        Args:
            version: Release version, defaults to the descriptor's version
            platform: Platform key, defaults to defaultPlatform

        Returns:
            The URL with every placeholder substituted
        """
        return self.url_template.replace(
            VERSION_PLACEHOLDER, version or self.version
        ).replace(PLATFORM_PLACEHOLDER, platform or self.default_platform)

    def resolve_artifact(
        self, version: Optional[str] = None, platform: Optional[str] = None
    ) -> ArtifactRef:
        """
        Resolve which (url, checksum) pair to hand to the downloader.

        Pure lookup: no network access is performed.

        Raises:
            UnknownArtifactError: If no checksum is declared for the version or platform
        """
        version = version or self.version
        platform = platform or self.default_platform

        if version != self.version:
            raise UnknownArtifactError(
                f"{self.name} declares only version {self.version}, not {version}"
            )
        artifact = self.artifacts.get(platform)
        if artifact is None:
            raise UnknownArtifactError(
                f"{self.name} {self.version} has no artifact for platform {platform}"
            )

        return ArtifactRef(self.artifact_url(version, platform), artifact.sha256)

    def install(
        self,
        extracted_path: Union[str, pathlib.Path],
        bin_directory: Union[str, pathlib.Path],
    ) -> List[pathlib.Path]:
        """
        Copy the declared binaries from the extracted artifact into the bin directory.

        Every binary is looked up before anything is written, so a missing file
        leaves nothing installed. Copies are staged in the bin directory and
        only replace the installed files once all of them are written, so a
        failed write keeps any previously installed binaries intact.

        Args:
            extracted_path: Root of the extracted archive
            bin_directory: Installation binary directory

        Returns:
            Paths of the installed files

        Raises:
            MissingFileError: If a declared binary is absent from the artifact
            WriteFailureError: If a binary cannot be written
        """
        root = self._artifact_root(pathlib.Path(extracted_path))

        sources = []
        for binary in self.install_step.binaries:
            source = root / binary
            if not source.is_file():
                raise MissingFileError(binary, str(root))
            sources.append(source)

        bin_dir = pathlib.Path(bin_directory)
        targets = [bin_dir / source.name for source in sources]
        for target in targets:
            if target.is_dir():
                raise WriteFailureError(target.name, str(bin_dir), "a directory is in the way")

        # Stage every copy next to its target, then swap them in; a failure
        # before the swap leaves the previous binaries untouched
        staged: List[pathlib.Path] = []
        current = sources[0]
        try:
            bin_dir.mkdir(parents=True, exist_ok=True)
            for current in sources:
                temp = bin_dir / f".{current.name}.kitbrew-tmp"
                staged.append(temp)
                shutil.copyfile(current, temp)
                mode = temp.stat().st_mode
                temp.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            for temp, target in zip(staged, targets):
                os.replace(temp, target)
        except OSError as e:
            for temp in staged:
                temp.unlink(missing_ok=True)
            raise WriteFailureError(current.name, str(bin_dir), e.strerror or str(e)) from e

        return targets

    @staticmethod
    def _artifact_root(extracted_path: pathlib.Path) -> pathlib.Path:
        # Archives that wrap everything in one top-level folder install from inside it
        if extracted_path.is_dir():
            entries = list(extracted_path.iterdir())
            if len(entries) == 1 and entries[0].is_dir():
                return entries[0]
        return extracted_path

    def with_release(self, version: str, checksums: Dict[str, str]) -> "PackageDescriptor":
        """
        Create the descriptor of a new release.

        Args:
            version: The new version
            checksums: SHA-256 digest per platform key; replaces all artifacts

        Returns:
            A new, validated PackageDescriptor
        """
        data = self.to_dict()
        data["version"] = version
        data["artifacts"] = {key: {"sha256": value} for key, value in checksums.items()}
        return PackageDescriptor.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dict using the camelCase aliases."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageDescriptor":
        """
        Create a PackageDescriptor from a dictionary.

        Raises:
            MalformedDescriptorError: If the data does not describe a valid package
            VersionDriftError: If the URL template hard-codes the version
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            name = data.get("name", "<unnamed>") if isinstance(data, dict) else "<unnamed>"
            raise MalformedDescriptorError(f"Invalid descriptor for {name}: {e}") from e

    @classmethod
    def from_json(cls, text: str) -> "PackageDescriptor":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedDescriptorError(f"Descriptor is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedDescriptorError("Descriptor must be a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_json_file(cls, path: Union[str, pathlib.Path]) -> "PackageDescriptor":
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise MalformedDescriptorError(f"Cannot read descriptor {path}: {e}") from e
        return cls.from_json(text)
