"""Bulk upload schemas."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel


class ProgressModel(BaseModel):
    current: int
    total: int
    phase: str
    percentage: int


class BulkResponse(BaseModel):
    status: Literal["done", "cancelled"]
    mode: Literal["air", "road"]
    total_rows: int
    failed_rows: int
    results: List[Dict[str, str]]
    progress: ProgressModel


class CancelResponse(BaseModel):
    cancelled: bool
    progress: ProgressModel
