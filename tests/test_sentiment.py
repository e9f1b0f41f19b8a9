"""
Tests for backbench sentiment aggregation.

Validates:
- Rebellion risk breakpoints
- Loyalty buckets partition the population
- Faction moods, empty factions and the worst-faction rule
"""

from __future__ import annotations

import pytest

from chancellor_core.model.schema import Faction, RebellionRisk, Representative
from chancellor_core.politics.sentiment import aggregate, classify_rebellion_risk, faction_of


def _rep(i: int, ideology: float, loyalty: float) -> Representative:
    return Representative(id=i, ideology=ideology, loyalty=loyalty)


class TestRebellionRisk:

    @pytest.mark.parametrize(
        "ready,expected",
        [
            (0, RebellionRisk.NONE),
            (5, RebellionRisk.NONE),
            (6, RebellionRisk.LOW),
            (15, RebellionRisk.LOW),
            (16, RebellionRisk.MODERATE),
            (30, RebellionRisk.MODERATE),
            (31, RebellionRisk.HIGH),
            (50, RebellionRisk.HIGH),
            (51, RebellionRisk.CRITICAL),
        ],
    )
    def test_breakpoints(self, ready, expected):
        assert classify_rebellion_risk(ready) == expected


class TestAggregate:

    def test_buckets_partition_population(self):
        population = [
            _rep(0, 0.0, 20.0),
            _rep(1, 0.0, 45.0),
            _rep(2, 0.0, 60.0),
            _rep(3, 0.0, 90.0),
        ]
        snapshot = aggregate(population)
        assert snapshot.rebellion_ready == 1
        assert snapshot.wavering == 1
        assert snapshot.loyal == 2
        assert (
            snapshot.rebellion_ready + snapshot.wavering + snapshot.loyal
            == snapshot.population_size
            == 4
        )

    def test_overall_mood_is_mean_loyalty(self):
        population = [_rep(0, -1.0, 40.0), _rep(1, 0.0, 80.0), _rep(2, 0.0, 90.0)]
        snapshot = aggregate(population)
        assert snapshot.overall_mood == pytest.approx(70.0)
        assert snapshot.left.mood == pytest.approx(40.0)
        assert snapshot.centre.mood == pytest.approx(85.0)

    def test_empty_faction_reports_neutral_mood(self):
        snapshot = aggregate([_rep(0, 0.0, 90.0)])
        assert snapshot.left.count == 0
        assert snapshot.left.mood == 60.0
        assert snapshot.right.mood == 60.0

    def test_empty_population(self):
        snapshot = aggregate([])
        assert snapshot.overall_mood == 60.0
        assert snapshot.population_size == 0
        assert snapshot.rebellion_risk == RebellionRisk.NONE

    def test_worst_faction_ignores_empty_factions(self):
        """An empty faction's neutral 60 is never reported as the worst."""
        population = [_rep(0, 0.0, 65.0), _rep(1, 1.0, 70.0)]
        assert aggregate(population).worst_faction == Faction.CENTRE

    def test_worst_faction_is_lowest_mood(self):
        population = [_rep(0, -1.0, 50.0), _rep(1, 0.0, 80.0), _rep(2, 1.0, 70.0)]
        assert aggregate(population).worst_faction == Faction.LEFT

    def test_systemic_discontent_reports_all(self):
        population = [_rep(0, -1.0, 30.0), _rep(1, 0.0, 35.0), _rep(2, 1.0, 38.0)]
        assert aggregate(population).worst_faction == Faction.ALL

    def test_faction_boundaries(self):
        assert faction_of(_rep(0, -0.5, 50.0)) == Faction.CENTRE
        assert faction_of(_rep(0, -0.51, 50.0)) == Faction.LEFT
        assert faction_of(_rep(0, 0.5, 50.0)) == Faction.CENTRE
        assert faction_of(_rep(0, 0.51, 50.0)) == Faction.RIGHT
