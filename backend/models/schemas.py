"""Pydantic schemas for API responses."""

from typing import Any

from pydantic import BaseModel


class RecordsResponse(BaseModel):
    record: Any
    masked: bool


class WriteResponse(BaseModel):
    metadata: dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    service: str
    confidentiality: str | None = None
