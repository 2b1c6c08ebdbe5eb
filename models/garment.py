"""Garment data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from models.taxonomy import validate_category, validate_color


def new_identifier() -> str:
    """Return a fresh opaque identifier for closet records."""

    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Accept ``datetime`` instances or ISO-8601 strings; naive values are UTC."""

    if value is None or value == "":
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Garment:
    """A single item in the user's closet."""

    category: str
    color: str
    garment_id: str = field(default_factory=new_identifier)
    image: Optional[bytes] = field(default=None, repr=False)
    favorite: bool = False
    times_worn: int = 0
    last_worn: Optional[datetime] = None
    date_added: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.category = validate_category(self.category)
        self.color = validate_color(self.color)
        self.favorite = bool(self.favorite)
        self.times_worn = int(self.times_worn)
        if self.times_worn < 0:
            raise ValueError(f"times_worn must be non-negative, got {self.times_worn}")
        self.last_worn = coerce_datetime(self.last_worn)
        self.date_added = coerce_datetime(self.date_added) or utcnow()

    def mark_worn(self, worn_at: datetime) -> None:
        """Apply a single wear event."""

        self.times_worn += 1
        self.last_worn = worn_at


def garment_from_payload(payload: Dict[str, Any]) -> Garment:
    """Factory to build a :class:`Garment` from a loose payload."""

    missing = [name for name in ("category", "color") if not payload.get(name)]
    if missing:
        raise ValueError(f"Missing required fields for Garment: {missing}")

    kwargs: Dict[str, Any] = {
        "category": str(payload["category"]),
        "color": str(payload["color"]),
        "image": payload.get("image"),
        "favorite": bool(payload.get("favorite", False)),
        "times_worn": int(payload.get("times_worn", 0) or 0),
        "last_worn": payload.get("last_worn"),
    }
    if payload.get("garment_id"):
        kwargs["garment_id"] = str(payload["garment_id"])
    if payload.get("date_added"):
        kwargs["date_added"] = payload["date_added"]
    return Garment(**kwargs)


def garment_to_payload(garment: Garment, include_image: bool = False) -> Dict[str, Any]:
    """Serialise a garment into JSON-friendly primitives."""

    payload: Dict[str, Any] = {
        "garment_id": garment.garment_id,
        "category": garment.category,
        "color": garment.color,
        "favorite": garment.favorite,
        "times_worn": garment.times_worn,
        "last_worn": garment.last_worn.isoformat() if garment.last_worn else None,
        "date_added": garment.date_added.isoformat(),
        "has_image": garment.image is not None,
    }
    if include_image:
        payload["image"] = garment.image
    return payload


__all__ = ["Garment", "coerce_datetime", "garment_from_payload", "garment_to_payload", "new_identifier", "utcnow"]
