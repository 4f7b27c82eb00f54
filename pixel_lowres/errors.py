"""Exception hierarchy shared by the CLI and the remote command bridge."""

from __future__ import annotations


class LowresError(Exception):
    """Base class for every failure that aborts a conversion."""


class ImageLoadError(LowresError):
    """The input path could not be read or its bytes could not be decoded."""


class EncodeError(LowresError):
    """The PNG encoder rejected the pixel data or failed mid-write."""


class OutputError(LowresError):
    """The output file could not be created."""


class ConfigError(LowresError, ValueError):
    """A configuration value (or an image dimension) is unusable."""
