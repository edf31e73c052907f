"""
This module contains the exceptions raised by kitbrew.
"""


class KitbrewException(Exception):
    """
    Exceptions raised by kitbrew.
    """

    def __init__(self, message: str):
        """
        Initializes the exception with the given message.
        """
        super().__init__(message)
        self.message = message


class ConfigError(KitbrewException):
    """Invalid configuration file or values."""


class UnsupportedPlatformError(KitbrewException):
    """
    The host does not satisfy the descriptor's platform requirement.

    This is a hard stop: nothing is downloaded and nothing is retried.
    """

    def __init__(self, package: str, requirement: str):
        super().__init__("Hardware not supported")
        self.package = package
        self.requirement = requirement


class MalformedDescriptorError(KitbrewException):
    """The descriptor could not be loaded."""


class VersionDriftError(MalformedDescriptorError):
    """
    The URL template hard-codes the release version.

    The version must only be stated once, in the version field; the URL is
    derived from it.
    """

    def __init__(self, literal: str, url_template: str):
        super().__init__(
            f"URL template embeds the literal version {literal!r}; "
            f"use the {{version}} placeholder instead: {url_template}"
        )
        self.version = literal
        self.url_template = url_template


class UnknownArtifactError(KitbrewException):
    """No artifact is declared for the requested version or platform."""


class DownloadError(KitbrewException):
    """The artifact could not be fetched."""


class ChecksumMismatchError(KitbrewException):
    """The downloaded bytes do not match the declared SHA-256 digest."""

    def __init__(self, url: str, expected: str, actual: str):
        super().__init__(
            f"SHA256 mismatch for {url}\nExpected: {expected}\nActual: {actual}"
        )
        self.url = url
        self.expected = expected
        self.actual = actual


class ExtractionError(KitbrewException):
    """The downloaded archive could not be extracted."""


class InstallError(KitbrewException):
    """Base class for failures of the install step."""


class MissingFileError(InstallError):
    """An expected file is absent from the extracted artifact."""

    def __init__(self, filename: str, search_root: str):
        super().__init__(f"{filename} not found in extracted artifact at {search_root}")
        self.filename = filename
        self.search_root = search_root


class WriteFailureError(InstallError):
    """A file could not be written into the installation directory."""

    def __init__(self, filename: str, destination: str, reason: str):
        super().__init__(f"Failed to install {filename} into {destination}: {reason}")
        self.filename = filename
        self.destination = destination
        self.reason = reason


class FormulaRenderError(KitbrewException):
    """The descriptor cannot be expressed as a Homebrew formula."""
