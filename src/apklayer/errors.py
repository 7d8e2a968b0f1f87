from __future__ import annotations


class ApkLayerError(Exception):
    """Base class for every failure raised by a build stage."""


class EnvironmentSetupError(ApkLayerError):
    pass


class ExecutionError(ApkLayerError):
    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode


class ArchiveError(ApkLayerError):
    pass


class LayerFormatError(ApkLayerError):
    pass


class PackageIndexError(ApkLayerError):
    pass


class TagParseError(ApkLayerError, ValueError):
    pass


class SBOMError(ApkLayerError):
    pass
