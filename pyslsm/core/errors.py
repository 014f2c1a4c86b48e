"""pyslsm.core.errors"""


class ConfigurationError(ValueError):
    """Malformed mesh or level-set data, detected before any geometry work."""
