"""Exceptions raised while building images and patching firmware."""


class CrcAppenderError(Exception):
    """Base class for all errors raised by this package."""


class PathNotUnderRootError(CrcAppenderError, ValueError):
    """A path handed to the normalizer does not live under the image root."""


class InvalidPathError(CrcAppenderError):
    """A path cannot be stored in the image as UTF-8."""


class TransformError(CrcAppenderError):
    """A script file could not be decoded for comment stripping."""


class ImageFormatError(CrcAppenderError):
    """Data passed to the image reader is not a valid FS image."""


class FirmwareError(CrcAppenderError):
    """The firmware binary cannot carry an FS image or checksum."""
