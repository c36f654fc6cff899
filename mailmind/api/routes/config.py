"""Threshold endpoint so the UI never hard-codes policy values."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from mailmind.observability.confidence import get_all_thresholds

router = APIRouter(prefix="/api", tags=["config"])


@router.get("/config/thresholds")
async def get_thresholds() -> dict[str, Any]:
    return {"version": "1.0.0", "thresholds": get_all_thresholds()}
