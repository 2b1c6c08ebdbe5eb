"""Outfit suggestion and wear tracking with transparent diagnostics."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from closet_app.logging_config import log_event
from logic.validation import SuggestOutfitInput
from models.garment import Garment, utcnow
from models.style_tables import ESSENTIAL_CATEGORIES, categories_for_occasion, colors_for_mood
from tools.observability import instrument_operation
from tools.wardrobe_store import WardrobeStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateSelectionResult:
    items: List[Garment]
    diagnostics: Dict[str, object]


@dataclass(frozen=True)
class OutfitBuildResult:
    items: List[Garment]
    diagnostics: Dict[str, object]


def _category_contains(garment: Garment, keyword: str) -> bool:
    return keyword.lower() in garment.category.lower()


def select_candidates(
    occasion: str | None, mood: str | None, wardrobe: Sequence[Garment]
) -> CandidateSelectionResult:
    """Filter the wardrobe to garments eligible for an occasion or mood.

    A garment matches the occasion when its category contains one of the
    occasion's category keywords, and matches the mood when its color is in
    the mood's palette. With both filters active a garment needs to match
    either one. Unknown occasions and moods apply no filter.
    """

    occasion_categories = categories_for_occasion(occasion)
    mood_colors = colors_for_mood(mood)
    diagnostics: Dict[str, object] = {
        "initial_count": len(wardrobe),
        "occasion_categories": occasion_categories,
        "mood_colors": mood_colors,
        "applied_filters": [],
    }

    predicates: List[Callable[[Garment], bool]] = []
    if occasion_categories is not None:
        predicates.append(
            lambda garment: any(_category_contains(garment, keyword) for keyword in occasion_categories)
        )
        diagnostics["applied_filters"].append({"type": "occasion", "values": occasion_categories})
    if mood_colors is not None:
        palette = {color.lower() for color in mood_colors}
        predicates.append(lambda garment: garment.color.lower() in palette)
        diagnostics["applied_filters"].append({"type": "mood", "values": mood_colors})

    if predicates:
        items = [garment for garment in wardrobe if any(predicate(garment) for predicate in predicates)]
    else:
        items = list(wardrobe)
    diagnostics["final_count"] = len(items)
    logger.info("Selected %s of %s garments as outfit candidates", len(items), len(wardrobe))
    return CandidateSelectionResult(items=items, diagnostics=diagnostics)


def build_balanced_outfit(
    candidates: Sequence[Garment], rng: random.Random | None = None
) -> OutfitBuildResult:
    """Pick at most one random garment per essential category."""

    rng = rng or random.Random()
    outfit: List[Garment] = []
    missing: List[str] = []
    for essential in ESSENTIAL_CATEGORIES:
        matches = [garment for garment in candidates if _category_contains(garment, essential)]
        if not matches:
            missing.append(essential)
            continue
        outfit.append(rng.choice(matches))
    diagnostics: Dict[str, object] = {
        "chosen_ids": [garment.garment_id for garment in outfit],
        "missing_categories": missing,
    }
    logger.info("Built outfit with %s items, missing %s", len(outfit), missing)
    return OutfitBuildResult(items=outfit, diagnostics=diagnostics)


def suggest_outfit(
    occasion: str | None,
    mood: str | None,
    wardrobe: Sequence[Garment],
    rng: random.Random | None = None,
) -> List[Garment]:
    """Suggest a balanced outfit from a wardrobe snapshot.

    Returns between zero and four garments; an empty candidate pool yields an
    empty list.
    """

    candidates = select_candidates(occasion, mood, wardrobe)
    return build_balanced_outfit(candidates.items, rng).items


class RecommendationEngine:
    """Suggest outfits from the store and record wear events.

    ``rng`` and ``clock`` are injectable so suggestions and timestamps can be
    reproduced in tests.
    """

    def __init__(
        self,
        store: WardrobeStore,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock or utcnow

    @instrument_operation("suggest_outfit", input_model=SuggestOutfitInput)
    def suggest(self, occasion: str | None = None, mood: str | None = None) -> List[Garment]:
        wardrobe = self.store.fetch()
        return suggest_outfit(occasion, mood, wardrobe, self.rng)

    @instrument_operation("wear_outfit")
    def wear_outfit(self, items: Sequence[Garment]) -> Optional[datetime]:
        """Mark every garment as worn now, persisting before touching memory.

        The store applies all increments in one transaction. If it fails the
        error propagates and the garments are left unchanged. Returns the wear
        timestamp, or ``None`` when ``items`` is empty.
        """

        unique: Dict[str, Garment] = {}
        for item in items:
            unique.setdefault(item.garment_id, item)
        if not unique:
            return None
        worn_at = self.clock()
        self.store.record_wear(list(unique), worn_at)
        for garment in unique.values():
            garment.mark_worn(worn_at)
        log_event(logger, logging.INFO, "outfit_worn", garment_ids=list(unique), worn_at=worn_at)
        return worn_at


__all__ = [
    "select_candidates",
    "build_balanced_outfit",
    "suggest_outfit",
    "RecommendationEngine",
    "CandidateSelectionResult",
    "OutfitBuildResult",
]
