"""Configuration errors."""


class ConfigError(Exception):
    """Raised when a configuration source is unreadable or holds invalid values."""
