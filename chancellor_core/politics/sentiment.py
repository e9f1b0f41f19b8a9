"""Backbench sentiment — pure reduction of the representative population."""

from __future__ import annotations

from chancellor_core.model.schema import (
    Faction,
    FactionMood,
    RebellionRisk,
    Representative,
    SentimentSnapshot,
    clamp,
)
from chancellor_core.politics.backbench import (
    LEFT_IDEOLOGY_THRESHOLD,
    REBELLION_THRESHOLD,
    RIGHT_IDEOLOGY_THRESHOLD,
)

EMPTY_FACTION_MOOD = 60.0
WAVERING_CEILING = 60.0
SYSTEMIC_CRISIS_MOOD = 40.0

# (ready-to-rebel count strictly above, tier), checked in order
RISK_BREAKPOINTS: list[tuple[int, RebellionRisk]] = [
    (50, RebellionRisk.CRITICAL),
    (30, RebellionRisk.HIGH),
    (15, RebellionRisk.MODERATE),
    (5, RebellionRisk.LOW),
]


def classify_rebellion_risk(ready_to_rebel: int) -> RebellionRisk:
    for threshold, tier in RISK_BREAKPOINTS:
        if ready_to_rebel > threshold:
            return tier
    return RebellionRisk.NONE


def faction_of(rep: Representative) -> Faction:
    if rep.ideology < LEFT_IDEOLOGY_THRESHOLD:
        return Faction.LEFT
    if rep.ideology > RIGHT_IDEOLOGY_THRESHOLD:
        return Faction.RIGHT
    return Faction.CENTRE


def aggregate(population: list[Representative]) -> SentimentSnapshot:
    """
    Reduce the population to faction moods, loyalty buckets and a risk tier.

    Overall mood is the size-weighted mean of faction moods, which is the
    plain mean loyalty. An empty population reports neutral defaults.
    """
    loyalties: dict[Faction, list[float]] = {
        Faction.LEFT: [],
        Faction.CENTRE: [],
        Faction.RIGHT: [],
    }
    for rep in population:
        loyalties[faction_of(rep)].append(rep.loyalty)

    moods = {
        faction: FactionMood(
            mood=clamp(sum(values) / len(values), 0.0, 100.0)
            if values
            else EMPTY_FACTION_MOOD,
            count=len(values),
        )
        for faction, values in loyalties.items()
    }

    total = len(population)
    overall = (
        clamp(sum(m.mood * m.count for m in moods.values()) / total, 0.0, 100.0)
        if total
        else EMPTY_FACTION_MOOD
    )

    ready = sum(1 for rep in population if rep.loyalty < REBELLION_THRESHOLD)
    loyal = sum(1 for rep in population if rep.loyalty >= WAVERING_CEILING)

    if overall < SYSTEMIC_CRISIS_MOOD:
        worst = Faction.ALL
    else:
        populated = [f for f, m in moods.items() if m.count] or list(moods)
        worst = min(populated, key=lambda f: moods[f].mood)

    return SentimentSnapshot(
        overall_mood=overall,
        left=moods[Faction.LEFT],
        centre=moods[Faction.CENTRE],
        right=moods[Faction.RIGHT],
        rebellion_ready=ready,
        wavering=total - ready - loyal,
        loyal=loyal,
        rebellion_risk=classify_rebellion_risk(ready),
        worst_faction=worst,
    )
