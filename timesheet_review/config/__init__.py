"""
Configuration module for the review core.
"""
from .logging_config import LoggingConfig, configure_logging
from .settings import ReviewSystemConfig, get_config, load_config, reload_config

__all__ = [
    'LoggingConfig',
    'ReviewSystemConfig',
    'configure_logging',
    'get_config',
    'load_config',
    'reload_config'
]
