# wellcontrol/utils/error_handling.py

import logging
import traceback
from typing import Dict, Any, Optional

from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

class EngineError(Exception):
    """Base class for engine errors"""
    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

class ValidationError(EngineError):
    """Error for input validation failures"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            details=details
        )

class CalculationError(EngineError):
    """Error for calculation failures"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="calculation_error",
            details=details
        )

def handle_engine_error(error: Exception) -> EngineError:
    """
    Convert any exception to an appropriate EngineError.
    This provides consistent error handling across the services.

    Args:
        error: The exception to handle

    Returns:
        EngineError with the appropriate error code and details
    """
    if isinstance(error, EngineError):
        return error
    elif isinstance(error, PydanticValidationError):
        return ValidationError(
            message="Invalid input data",
            details={"errors": error.errors(include_url=False)}
        )
    else:
        # For unexpected errors, log the full traceback and return a generic error
        tb = traceback.format_exc()
        logger.error(f"Unexpected error: {str(error)}\n{tb}")

        return CalculationError(
            message="An unexpected error occurred",
            details={"error_type": type(error).__name__}
        )

def error_response(
    message: str,
    error_code: str = "internal_error",
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response dictionary.

    Args:
        message: Error message
        error_code: Error code for the caller
        details: Additional error details

    Returns:
        Standardized error response dictionary
    """
    return {
        "error": error_code,
        "message": message,
        "details": details or {}
    }
