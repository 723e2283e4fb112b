"""Typed structures shared across bot components."""

from __future__ import annotations

from typing import TypedDict

from ..models import RejectionReason


class ResolvedInput(TypedDict):
    """Username resolution outcome; exactly one field is set."""

    handle: str | None
    rejection: RejectionReason | None


class FetchSummary(TypedDict):
    """What a completed fetch-and-deliver run sent."""

    handle: str
    locators: int
    delivered: int
    skipped: int
    batches: int
    processing_time_ms: int
