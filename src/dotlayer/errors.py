"""dotlayer error hierarchy."""


class DotlayerError(Exception):
    """Base exception for all dotlayer errors."""


class ConfigError(DotlayerError):
    """Configuration file malformed or a configured path is unusable."""


class BackupError(DotlayerError):
    """An existing destination could not be copied aside or removed."""


class LinkError(DotlayerError):
    """A symlink or its parent directory could not be created."""
