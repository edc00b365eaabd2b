"""Shared Pydantic schemas for dashgate."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "dashgate"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""
