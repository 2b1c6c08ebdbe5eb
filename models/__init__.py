"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.garment import Garment, garment_from_payload, garment_to_payload
from models.outfit import CalendarSlot, OutfitEntry

__all__ = ["Garment", "garment_from_payload", "garment_to_payload", "OutfitEntry", "CalendarSlot"]
