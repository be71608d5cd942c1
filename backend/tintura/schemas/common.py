"""
Common API Response Schemas

Standardized error responses shared by every router.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response for all API errors.

    Error Codes:
        - VALIDATION_ERROR: Request validation failed (400 / 422)
        - INVALID_STATE: Operation not allowed in the current status (400)
        - NOT_FOUND: Resource not found (404)
        - CONFLICT / DUPLICATE_ERROR / CONCURRENCY_ERROR (409)
        - BUSINESS_RULE_ERROR: Business rule violation (422)
        - INTERNAL_ERROR: Unexpected internal error (500)
        - PERSISTENCE_ERROR: Store call failed, safe to retry (503)
        - SERVICE_UNAVAILABLE: Service temporarily unavailable (503)
    """
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the error occurred (UTC)")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "NOT_FOUND",
                "message": "Order with ID 123 not found",
                "details": {"resource": "Order", "resource_id": "123"},
                "timestamp": "2025-12-23T10:30:00Z",
            }
        }


class MessageResponse(BaseModel):
    """Simple acknowledgement."""
    message: str
