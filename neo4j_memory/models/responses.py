"""
Response utilities for the Neo4j memory server

This module provides standardized response formatting using Pydantic models.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseResponse(BaseModel):
    """Base response model with status and timestamp."""
    status: Annotated[str, Field(description="Status of the operation (success or error)")]
    timestamp: Annotated[datetime, Field(default_factory=datetime.now, description="Timestamp of the response")]

    model_config = ConfigDict(
        validate_assignment=True
    )


class SuccessResponse(BaseResponse):
    """Success response model."""
    status: str = "success"
    message: Optional[str] = Field(None, description="Success message")


class ErrorDetail(BaseModel):
    """Error detail model for standardized error responses."""
    code: Annotated[str, Field(description="Error code")]
    message: Annotated[str, Field(description="Error message")]
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ErrorResponse(BaseResponse):
    """Error response model."""
    status: str = "error"
    error: Annotated[ErrorDetail, Field(description="Error details")]


def create_error_response(
    message: str,
    code: str = "internal_error",
    details: Optional[Dict[str, Any]] = None
) -> ErrorResponse:
    """
    Create a standardized error response.

    Args:
        message: Error message
        code: Error code
        details: Optional additional error details

    Returns:
        ErrorResponse model instance
    """
    return ErrorResponse(
        status="error",
        timestamp=datetime.now(),
        error=ErrorDetail(code=code, message=message, details=details)
    )


def create_success_response(message: Optional[str] = None) -> SuccessResponse:
    """Create a standardized success response."""
    return SuccessResponse(status="success", timestamp=datetime.now(), message=message)


def model_to_json(model: BaseModel) -> str:
    """
    Convert a Pydantic model to a JSON string.

    Args:
        model: Pydantic model instance

    Returns:
        JSON string representation
    """
    return model.model_dump_json(by_alias=True, indent=2)
