"""Core configuration, logging, exceptions and rule constants."""

from .exceptions import AmortizationError, ImmoEngineError, InvalidParameterError
from .logging import configure_logging, get_logger
from .settings import EngineSettings, get_settings

__all__ = [
    "configure_logging",
    "get_logger",
    "EngineSettings",
    "get_settings",
    # Exceptions
    "ImmoEngineError",
    "InvalidParameterError",
    "AmortizationError",
]
