"""Pydantic schemas and helpers for validating closet requests."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models.taxonomy import validate_category, validate_color


class SuggestOutfitInput(BaseModel):
    """Occasion and mood for an outfit suggestion; both optional."""

    occasion: Optional[str] = None
    mood: Optional[str] = None

    @field_validator("occasion", "mood")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class NewGarmentInput(BaseModel):
    """Payload for adding a garment to the closet."""

    category: str = Field(min_length=1)
    color: str = Field(min_length=1)
    image_base64: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: str) -> str:
        return validate_category(value)

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        return validate_color(value)


class GarmentUpdateInput(BaseModel):
    """Partial update of a garment's category and/or color."""

    category: Optional[str] = None
    color: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: Optional[str]) -> Optional[str]:
        return validate_category(value) if value is not None else None

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: Optional[str]) -> Optional[str]:
        return validate_color(value) if value is not None else None


class WearOutfitInput(BaseModel):
    """Garments worn together."""

    garment_ids: List[str] = Field(min_length=1)


class DiaryEntryInput(BaseModel):
    """Payload for logging a worn outfit in the diary."""

    mood: str = Field(min_length=1)
    notes: str = ""
    garment_ids: List[str] = Field(default_factory=list)
    image_base64: Optional[str] = None


class DiaryEntryUpdateInput(BaseModel):
    mood: Optional[str] = None
    notes: Optional[str] = None


class CalendarSlotInput(BaseModel):
    """Payload for planning an outfit on the calendar."""

    date: datetime
    occasion: str = Field(min_length=1)
    notes: str = ""
    garment_ids: List[str] = Field(default_factory=list)


__all__ = [
    "SuggestOutfitInput",
    "NewGarmentInput",
    "GarmentUpdateInput",
    "WearOutfitInput",
    "DiaryEntryInput",
    "DiaryEntryUpdateInput",
    "CalendarSlotInput",
]
