"""
Validation and error handling for the jvmmonitor package.

This module provides input validation for configuration values and the
shared error-handling helpers used for consistent error reporting.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_cli_error,
)

# Validation functions
from .validators import (
    validate_boolean,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_cli_error",
    # Validators
    "validate_boolean",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
]
