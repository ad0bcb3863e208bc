from .loader import ConfigurationError, load_config, validate_job

__all__ = ["ConfigurationError", "load_config", "validate_job"]
