"""FastAPI server exposing the closet core to client apps."""

from __future__ import annotations

import base64
import os
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from closet_app.app import SmartClosetApp
from closet_app.logging_config import get_logger
from logic.validation import (
    CalendarSlotInput,
    DiaryEntryInput,
    DiaryEntryUpdateInput,
    GarmentUpdateInput,
    NewGarmentInput,
    SuggestOutfitInput,
    WearOutfitInput,
)
from models.garment import Garment, garment_to_payload
from models.outfit import CalendarSlot, OutfitEntry
from tools.wardrobe_store import StoreError, StoreReadFailure

LOGGER = get_logger(__name__)


def _decode_image(raw: Optional[str]) -> Optional[bytes]:
    if not raw:
        return None
    return base64.b64decode(raw, validate=True)


def _entry_payload(entry: OutfitEntry) -> Dict[str, Any]:
    return {
        "entry_id": entry.entry_id,
        "logged_at": entry.logged_at.isoformat(),
        "mood": entry.mood,
        "notes": entry.notes,
        "has_image": entry.image is not None,
        "garment_ids": entry.garment_ids,
    }


def _slot_payload(slot: CalendarSlot) -> Dict[str, Any]:
    return {
        "slot_id": slot.slot_id,
        "date": slot.date.isoformat(),
        "occasion": slot.occasion,
        "notes": slot.notes,
        "garment_ids": slot.garment_ids,
    }


def create_app(closet_app: SmartClosetApp | None = None) -> FastAPI:
    """Build the FastAPI instance around a closet app."""

    closet_app = closet_app or SmartClosetApp()
    app = FastAPI(title="Smart Closet", version="0.1.0")
    app.state.closet_app = closet_app

    @app.exception_handler(StoreError)
    async def _store_error(_: Request, exc: StoreError) -> JSONResponse:
        LOGGER.error("Store failure during request: %s", exc)
        content: Dict[str, Any] = {"detail": str(exc), "operation": exc.operation}
        if isinstance(exc, StoreReadFailure):
            content["items"] = [garment_to_payload(item) for item in closet_app.closet.items]
        return JSONResponse(status_code=503, content=content)

    @app.exception_handler(ValueError)
    async def _value_error(_: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    def _garment_or_404(garment_id: str) -> Garment:
        garment = closet_app.closet.get_item(garment_id)
        if garment is None:
            raise HTTPException(status_code=404, detail=f"Unknown garment {garment_id}")
        return garment

    def _garments_or_404(garment_ids: List[str]) -> List[Garment]:
        try:
            return closet_app.closet.get_items(garment_ids)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc

    def _entry_or_404(entry_id: str) -> OutfitEntry:
        entry = closet_app.diary.find_entry(entry_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown diary entry {entry_id}")
        return entry

    @app.get("/healthz")
    def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "smart-closet",
            "environment": closet_app.config.environment or "local",
        }

    @app.get("/garments")
    def list_garments(
        category: str = "All", color: str = "All", favorites_only: bool = False
    ) -> dict:
        items = closet_app.closet.set_filters(category=category, color=color, favorites_only=favorites_only)
        return {"items": [garment_to_payload(item) for item in items]}

    @app.post("/garments", status_code=201)
    def add_garment(request: NewGarmentInput) -> dict:
        garment = closet_app.closet.add_item(
            category=request.category, color=request.color, image=_decode_image(request.image_base64)
        )
        return garment_to_payload(garment)

    @app.get("/garments/{garment_id}")
    def get_garment(garment_id: str) -> dict:
        return garment_to_payload(_garment_or_404(garment_id))

    @app.patch("/garments/{garment_id}")
    def update_garment(garment_id: str, request: GarmentUpdateInput) -> dict:
        garment = _garment_or_404(garment_id)
        updated = closet_app.closet.update_item(garment, category=request.category, color=request.color)
        return garment_to_payload(updated)

    @app.post("/garments/{garment_id}/favorite")
    def toggle_favorite(garment_id: str) -> dict:
        garment = _garment_or_404(garment_id)
        return {"garment_id": garment_id, "favorite": closet_app.closet.toggle_favorite(garment)}

    @app.delete("/garments/{garment_id}")
    def delete_garment(garment_id: str) -> dict:
        garment = _garment_or_404(garment_id)
        return {"deleted": closet_app.closet.delete_item(garment)}

    @app.post("/outfits/suggest")
    def suggest_outfit(request: SuggestOutfitInput) -> dict:
        items = closet_app.recommendations.suggest(occasion=request.occasion, mood=request.mood)
        return {"items": [garment_to_payload(item) for item in items]}

    @app.post("/outfits/wear")
    def wear_outfit(request: WearOutfitInput) -> dict:
        items = _garments_or_404(request.garment_ids)
        worn_at = closet_app.recommendations.wear_outfit(items)
        return {
            "worn_at": worn_at.isoformat() if worn_at else None,
            "items": [garment_to_payload(item) for item in items],
        }

    @app.get("/stats")
    def statistics() -> dict:
        return asdict(closet_app.wardrobe_summary())

    @app.get("/diary")
    def list_diary(mood: str = "All") -> dict:
        entries = closet_app.diary.set_mood_filter(mood)
        return {
            "entries": [_entry_payload(entry) for entry in entries],
            "mood_distribution": closet_app.diary.mood_distribution(),
        }

    @app.post("/diary", status_code=201)
    def add_diary_entry(request: DiaryEntryInput) -> dict:
        items = _garments_or_404(request.garment_ids) if request.garment_ids else []
        entry = closet_app.diary.add_entry(
            mood=request.mood,
            notes=request.notes,
            items=items,
            image=_decode_image(request.image_base64),
        )
        return _entry_payload(entry)

    @app.patch("/diary/{entry_id}")
    def update_diary_entry(entry_id: str, request: DiaryEntryUpdateInput) -> dict:
        entry = _entry_or_404(entry_id)
        return _entry_payload(closet_app.diary.update_entry(entry, mood=request.mood, notes=request.notes))

    @app.delete("/diary/{entry_id}")
    def delete_diary_entry(entry_id: str) -> dict:
        entry = _entry_or_404(entry_id)
        return {"deleted": closet_app.diary.delete_entry(entry)}

    @app.get("/calendar")
    def list_calendar(day: date) -> dict:
        return {"slots": [_slot_payload(slot) for slot in closet_app.planner.slots_for_date(day)]}

    @app.post("/calendar", status_code=201)
    def add_calendar_slot(request: CalendarSlotInput) -> dict:
        items = _garments_or_404(request.garment_ids) if request.garment_ids else []
        slot = closet_app.planner.save_slot(
            date=request.date, occasion=request.occasion, notes=request.notes, items=items
        )
        return _slot_payload(slot)

    return app


def run(closet_app: SmartClosetApp | None = None) -> None:
    """Serve the API with uvicorn on ``PORT`` (default 8080)."""

    import uvicorn

    uvicorn.run(create_app(closet_app), host="0.0.0.0", port=int(os.getenv("PORT", "8080")), reload=False)


if __name__ == "__main__":
    run()
