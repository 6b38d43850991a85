"""Exceptions for codegraph-config."""


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Configuration file has a format the document store cannot handle."""

    pass


class MalformedSectionError(ConfigError):
    """Managed section markers are unterminated or out of order."""

    pass
