"""
Tests for the Backbench Model.

Validates:
- Population generation (size, ids, factions, determinism)
- Each loyalty term in isolation, including its bounds
- Per-turn update: clamping, rebellion counter, no mutation of the input
- A sustained tax rise driving loyalty under the rebellion threshold
"""

from __future__ import annotations

import random

import pytest

from chancellor_core.model.schema import (
    FiscalAggregates,
    ManifestoBreaches,
    PollingState,
    Region,
    Representative,
    TaxRates,
)
from chancellor_core.politics.backbench import (
    LoyaltyContext,
    breach_penalty_term,
    constituency_term,
    generate_population,
    ideological_fit_term,
    reversion_term,
    shift_loyalty,
    tax_rise_above_lock,
    update_loyalty,
    update_population,
)
from chancellor_core.politics.sentiment import aggregate


NEUTRAL_APPROVAL = {region: 40.0 for region in Region}


def _rep(**overrides) -> Representative:
    values = dict(id=0, ideology=0.0, marginality=80.0, priority_weight=0.4, loyalty=60.0)
    values.update(overrides)
    return Representative(**values)


class TestPopulationGeneration:

    def test_generates_two_hundred_with_sequential_ids(self):
        population = generate_population(random.Random(42))
        assert len(population) == 200
        assert [rep.id for rep in population] == list(range(200))
        assert all(rep.loyalty == 85.0 for rep in population)
        assert all(rep.months_since_last_rebellion == 0 for rep in population)

    def test_same_seed_same_population(self):
        first = generate_population(random.Random(7))
        second = generate_population(random.Random(7))
        assert [r.model_dump() for r in first] == [r.model_dump() for r in second]

    def test_ideology_bands(self):
        population = generate_population(random.Random(3))
        for rep in population:
            assert (
                -1.5 <= rep.ideology <= -0.7
                or -0.3 <= rep.ideology <= 0.3
                or 0.5 <= rep.ideology <= 1.2
            )
        sentiment = aggregate(population)
        assert sentiment.left.count > 0
        assert sentiment.centre.count > sentiment.left.count
        assert sentiment.right.count > 0

    def test_marginal_seats_weight_their_constituency(self):
        population = generate_population(random.Random(11))
        for rep in population:
            if rep.marginality <= 50:
                assert rep.priority_weight >= 0.6
            else:
                assert rep.priority_weight <= 0.6


class TestLoyaltyTerms:
    """Each term is independently bounded."""

    def test_tax_rise_hits_every_faction(self):
        ctx = LoyaltyContext(tax_rise_points=2.0)
        for ideology in (-1.0, 0.0, 1.0):
            rep = _rep(ideology=ideology, priority_weight=0.5)
            assert ideological_fit_term(rep, ctx) == pytest.approx(-2.0)

    def test_ideology_term_clamped_before_weighting(self):
        ctx = LoyaltyContext(tax_rise_points=5.0)
        rep = _rep(priority_weight=0.4)
        assert ideological_fit_term(rep, ctx) == pytest.approx(-10.0 * 0.6)

    def test_left_welcomes_spending_right_resents_it(self):
        ctx = LoyaltyContext(spending_deviation_bn=100.0)
        left = _rep(ideology=-1.0, priority_weight=0.0)
        right = _rep(ideology=1.0, priority_weight=0.0)
        centre = _rep(ideology=0.0, priority_weight=0.0)
        assert ideological_fit_term(left, ctx) == pytest.approx(5.0)
        assert ideological_fit_term(right, ctx) == pytest.approx(-3.0)
        assert ideological_fit_term(centre, ctx) == 0.0

    def test_right_penalises_debt_above_100_percent(self):
        ctx = LoyaltyContext(debt_pct_gdp=110.0)
        right = _rep(ideology=1.0, priority_weight=0.0)
        assert ideological_fit_term(right, ctx) == pytest.approx(-2.0)

    def test_constituency_amplified_in_marginal_seats(self):
        ctx = LoyaltyContext(regional_approval={Region.ENGLAND: 50.0})
        marginal = _rep(marginality=20.0, priority_weight=0.8)
        # 1.0 signal * (80 / 20) amplifier * 0.8 weight
        assert constituency_term(marginal, ctx) == pytest.approx(3.2)

    def test_constituency_term_bounded(self):
        ctx = LoyaltyContext(regional_approval={Region.ENGLAND: 100.0})
        rep = _rep(marginality=0.0, priority_weight=1.0)
        assert constituency_term(rep, ctx) == pytest.approx(10.0)

    def test_breach_penalty_capped(self):
        assert breach_penalty_term(LoyaltyContext(total_breaches=0)) == 0.0
        assert breach_penalty_term(LoyaltyContext(total_breaches=3)) == pytest.approx(-6.0)
        assert breach_penalty_term(LoyaltyContext(total_breaches=10)) == pytest.approx(-10.0)

    def test_reversion_pulls_toward_sixty(self):
        assert reversion_term(_rep(loyalty=85.0)) == pytest.approx(-1.25)
        assert reversion_term(_rep(loyalty=40.0)) == pytest.approx(1.0)


class TestLoyaltyUpdate:

    def test_input_not_modified(self):
        rep = _rep(loyalty=85.0)
        update_loyalty(rep, LoyaltyContext(tax_rise_points=3.0, total_breaches=2))
        assert rep.loyalty == 85.0

    def test_clamped_at_zero(self):
        rep = _rep(loyalty=2.0, priority_weight=0.0)
        updated = update_loyalty(rep, LoyaltyContext(tax_rise_points=10.0, total_breaches=10))
        assert updated.loyalty == 0.0

    def test_rebellion_counter_resets_below_threshold(self):
        rep = _rep(loyalty=31.0, months_since_last_rebellion=9, priority_weight=0.0)
        updated = update_loyalty(rep, LoyaltyContext(tax_rise_points=2.0))
        assert updated.loyalty < 30.0
        assert updated.months_since_last_rebellion == 0

    def test_rebellion_counter_increments_otherwise(self):
        rep = _rep(loyalty=70.0, months_since_last_rebellion=4)
        updated = update_loyalty(rep, LoyaltyContext(regional_approval=NEUTRAL_APPROVAL))
        assert updated.months_since_last_rebellion == 5

    def test_population_update_preserves_order_and_ids(self):
        population = generate_population(random.Random(5))
        updated = update_population(population, LoyaltyContext())
        assert [rep.id for rep in updated] == [rep.id for rep in population]

    def test_shift_loyalty_clamps(self):
        population = [_rep(id=0, loyalty=95.0), _rep(id=1, loyalty=5.0)]
        up = shift_loyalty(population, 10.0)
        down = shift_loyalty(population, -10.0)
        assert [r.loyalty for r in up] == [100.0, 15.0]
        assert [r.loyalty for r in down] == [85.0, 0.0]


class TestTaxRiseScenario:
    """A five point tax rise held for three months erodes a safe-seat party."""

    def setup_method(self):
        self.population = [
            _rep(id=i, ideology=0.0, marginality=80.0, priority_weight=0.2 + 0.03 * (i % 10), loyalty=45.0)
            for i in range(40)
        ]
        self.ctx = LoyaltyContext(
            tax_rise_points=5.0,
            total_breaches=1,
            regional_approval=NEUTRAL_APPROVAL,
        )

    def test_mood_falls_every_turn_and_rebels_appear(self):
        moods = [aggregate(self.population).overall_mood]
        population = self.population
        for _ in range(3):
            population = update_population(population, self.ctx)
            moods.append(aggregate(population).overall_mood)

        assert moods[1] < moods[0]
        assert moods[2] < moods[1]
        assert moods[3] < moods[2]
        assert aggregate(population).rebellion_ready > 0


class TestLoyaltyContext:

    def test_from_state(self):
        fiscal = FiscalAggregates(
            total_spending_bn=1120.0,
            tax_rates=TaxRates(income_tax_basic=22.0, vat=19.0),
            debt_pct_gdp=101.0,
        )
        manifesto = ManifestoBreaches(tax_locks=1, fiscal_rules=1)
        ctx = LoyaltyContext.from_state(fiscal, PollingState(), manifesto)
        assert ctx.spending_deviation_bn == pytest.approx(20.0)
        assert ctx.tax_rise_points == pytest.approx(2.0)
        assert ctx.debt_pct_gdp == 101.0
        assert ctx.total_breaches == 2
        assert Region.SCOTLAND in ctx.regional_approval

    def test_tax_cuts_do_not_offset_rises(self):
        fiscal = FiscalAggregates(tax_rates=TaxRates(income_tax_basic=21.0, vat=15.0, ni_employee=6.0))
        assert tax_rise_above_lock(fiscal) == pytest.approx(1.0)
