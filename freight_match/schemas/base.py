"""
Base Schemas

Envelope models shared by all API responses.

Every successful endpoint answers {message, data, proofs}; errors answer
{error: {code, message, details, trace_id}}.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class Proofs(BaseModel):
    """
    Tracing information attached to every response.

    - trace_id: Request trace ID
    - sources: Data sources consulted (e.g. "carrier_cache", "fmcsa")
    - algorithm: Algorithm identifier for computed results
    """
    trace_id: Optional[str] = Field(None, description="Request trace ID")
    sources: Optional[List[str]] = Field(None, description="Data sources consulted")
    algorithm: Optional[str] = Field(None, description="Algorithm identifier")

    model_config = ConfigDict(extra="allow")


class ApiResponse(BaseModel):
    """Standard success envelope."""
    message: str = Field(..., description="Human-readable summary")
    data: Dict[str, Any] = Field(default_factory=dict, description="Response payload")
    proofs: Proofs = Field(default_factory=Proofs, description="Tracing information")


class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Error context")
    trace_id: Optional[str] = Field(None, description="Request trace ID")


class ErrorResponse(BaseModel):
    """Standard error envelope rendered by the AppError handler."""
    error: ErrorBody
