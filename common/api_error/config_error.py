# common/api_error/config_error.py
class ConfigurationError(RuntimeError):
    """
    Raised when application configuration is missing or invalid at startup.
    """


__all__ = ["ConfigurationError"]
