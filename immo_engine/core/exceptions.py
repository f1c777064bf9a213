"""Custom exceptions for immo_engine.

Domain-specific exception types raised by the simulation engine.
"""

from __future__ import annotations

from typing import Any


class ImmoEngineError(Exception):
    """Base exception for all immo_engine errors."""
    pass


# --- Input Errors ---

class InvalidParameterError(ImmoEngineError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Calculation Errors ---

class AmortizationError(ImmoEngineError):
    """Error generating amortization schedule."""
    pass
