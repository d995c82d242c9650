"""
Data models for events and advisories within the marketplace core.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import AdvisoryLevel, MarketComponent


class MarketEvent(BaseModel):
    """Event published on the market event bus."""

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str  # e.g. "product.created"
    payload: dict[str, Any]
    source: MarketComponent
    timestamp: datetime = Field(default_factory=datetime.now)


class Advisory(BaseModel):
    """Non-fatal, user-visible status message."""

    level: AdvisoryLevel
    message: str
    source: MarketComponent = MarketComponent.CATALOG_SYNC
    collection: str | None = None  # Set for per-collection load failures
    timestamp: datetime = Field(default_factory=datetime.now)
