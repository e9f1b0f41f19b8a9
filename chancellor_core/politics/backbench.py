"""
Backbench Model — a fixed population of representatives and their loyalty.

The parliamentary party is modelled as 200 independent agents. Each has an
ideology, a constituency marginality, and a priority weight that blends how
much they vote their conscience versus their seat. Once per turn every
agent's loyalty moves by the sum of four independently bounded terms:

1. Ideological fit   — spending stance and tax-lock rises, weighted by (1 − w)
2. Constituency      — regional approval, amplified in marginal seats, weighted by w
3. Breach penalty    — a flat charge for every manifesto pledge broken this term
4. Mean reversion    — 5% of the gap back toward 60, the fading of early goodwill

The update is deterministic. Randomness is used only to generate the
population, through an injected seeded source.

References:
    Loyalty thresholds — below 30 is "ready to rebel"
    Tax lock — income tax basic rate, VAT, employee National Insurance
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from chancellor_core.model.schema import (
    POPULATION_SIZE,
    FiscalAggregates,
    ManifestoBreaches,
    PollingState,
    Region,
    Representative,
    clamp,
)

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Model Constants
# ════════════════════════════════════════════════════════════════

REBELLION_THRESHOLD = 30.0
LOYALTY_BASELINE = 60.0
MEAN_REVERSION_RATE = 0.05
STARTING_LOYALTY = 85.0

LEFT_IDEOLOGY_THRESHOLD = -0.5
RIGHT_IDEOLOGY_THRESHOLD = 0.5

SPENDING_BASELINE_BN = 1100.0
LEFT_SPENDING_SENSITIVITY = 0.05  # Loyalty per £bn above baseline
RIGHT_SPENDING_SENSITIVITY = -0.03
TAX_LOCK_PENALTY_PER_POINT = 2.0
RIGHT_DEBT_CEILING_PCT = 100.0
RIGHT_DEBT_SENSITIVITY = 0.2
IDEOLOGY_TERM_LIMIT = 10.0

APPROVAL_BASELINE = 40.0
CONSTITUENCY_SENSITIVITY = 0.1
CONSTITUENCY_TERM_LIMIT = 10.0

BREACH_PENALTY_PER_BREACH = 2.0
BREACH_PENALTY_LIMIT = 10.0

REGION_WEIGHTS: dict[Region, float] = {
    Region.ENGLAND: 0.84,
    Region.SCOTLAND: 0.05,
    Region.WALES: 0.05,
    Region.NORTHERN_IRELAND: 0.06,
}


@dataclass(frozen=True)
class LoyaltyContext:
    """The slice of turn state every agent's loyalty update reads."""

    spending_deviation_bn: float = 0.0
    tax_rise_points: float = 0.0
    debt_pct_gdp: float = 0.0
    total_breaches: int = 0
    regional_approval: dict[Region, float] = field(default_factory=dict)

    @classmethod
    def from_state(
        cls,
        fiscal: FiscalAggregates,
        polling: PollingState,
        manifesto: ManifestoBreaches,
    ) -> LoyaltyContext:
        return cls(
            spending_deviation_bn=fiscal.total_spending_bn - SPENDING_BASELINE_BN,
            tax_rise_points=tax_rise_above_lock(fiscal),
            debt_pct_gdp=fiscal.debt_pct_gdp,
            total_breaches=manifesto.total,
            regional_approval=dict(polling.regional_approval),
        )


def tax_rise_above_lock(fiscal: FiscalAggregates) -> float:
    """Total percentage points by which locked taxes exceed their baseline."""
    rates, locked = fiscal.tax_rates, fiscal.locked_tax_rates
    return (
        max(0.0, rates.income_tax_basic - locked.income_tax_basic)
        + max(0.0, rates.vat - locked.vat)
        + max(0.0, rates.ni_employee - locked.ni_employee)
    )


# ════════════════════════════════════════════════════════════════
# Population Generation
# ════════════════════════════════════════════════════════════════


def generate_population(
    rng: random.Random, size: int = POPULATION_SIZE
) -> list[Representative]:
    """
    Create the parliamentary party.

    20% left (-1.5 to -0.7), 50% centre (-0.3 to 0.3), 30% right (0.5 to 1.2);
    30% of seats marginal (20–50) with constituency-heavy priority weights.
    """
    regions = list(REGION_WEIGHTS)
    weights = [REGION_WEIGHTS[r] for r in regions]
    population: list[Representative] = []

    for index in range(size):
        roll = rng.random()
        if roll < 0.2:
            ideology = rng.uniform(-1.5, -0.7)
        elif roll < 0.7:
            ideology = rng.uniform(-0.3, 0.3)
        else:
            ideology = rng.uniform(0.5, 1.2)

        if rng.random() < 0.3:
            marginality = rng.uniform(20.0, 50.0)
            priority_weight = rng.uniform(0.6, 0.9)
        else:
            marginality = rng.uniform(60.0, 100.0)
            priority_weight = rng.uniform(0.2, 0.6)

        population.append(
            Representative(
                id=index,
                ideology=ideology,
                marginality=marginality,
                priority_weight=priority_weight,
                loyalty=STARTING_LOYALTY,
                months_since_last_rebellion=0,
                region=rng.choices(regions, weights=weights)[0],
            )
        )

    logger.info("Generated backbench population of %d representatives", size)
    return population


# ════════════════════════════════════════════════════════════════
# Loyalty Terms
# ════════════════════════════════════════════════════════════════


def ideological_fit_term(rep: Representative, ctx: LoyaltyContext) -> float:
    fit = 0.0
    if rep.ideology < LEFT_IDEOLOGY_THRESHOLD:
        fit += ctx.spending_deviation_bn * LEFT_SPENDING_SENSITIVITY
    elif rep.ideology > RIGHT_IDEOLOGY_THRESHOLD:
        fit += ctx.spending_deviation_bn * RIGHT_SPENDING_SENSITIVITY
        if ctx.debt_pct_gdp > RIGHT_DEBT_CEILING_PCT:
            fit -= (ctx.debt_pct_gdp - RIGHT_DEBT_CEILING_PCT) * RIGHT_DEBT_SENSITIVITY

    # A broken tax lock is a cross-party pledge: everyone feels it.
    fit -= ctx.tax_rise_points * TAX_LOCK_PENALTY_PER_POINT

    fit = clamp(fit, -IDEOLOGY_TERM_LIMIT, IDEOLOGY_TERM_LIMIT)
    return fit * (1 - rep.priority_weight)


def constituency_term(rep: Representative, ctx: LoyaltyContext) -> float:
    approval = ctx.regional_approval.get(rep.region, APPROVAL_BASELINE)
    signal = (approval - APPROVAL_BASELINE) * CONSTITUENCY_SENSITIVITY
    marginal_amplifier = (100 - rep.marginality) / 20
    term = signal * marginal_amplifier * rep.priority_weight
    return clamp(term, -CONSTITUENCY_TERM_LIMIT, CONSTITUENCY_TERM_LIMIT)


def breach_penalty_term(ctx: LoyaltyContext) -> float:
    return -min(BREACH_PENALTY_LIMIT, ctx.total_breaches * BREACH_PENALTY_PER_BREACH)


def reversion_term(rep: Representative) -> float:
    return (LOYALTY_BASELINE - rep.loyalty) * MEAN_REVERSION_RATE


# ════════════════════════════════════════════════════════════════
# Updates
# ════════════════════════════════════════════════════════════════


def update_loyalty(rep: Representative, ctx: LoyaltyContext) -> Representative:
    """Return the representative after one turn. The input is not modified."""
    delta = (
        ideological_fit_term(rep, ctx)
        + constituency_term(rep, ctx)
        + breach_penalty_term(ctx)
        + reversion_term(rep)
    )
    loyalty = clamp(rep.loyalty + delta, 0.0, 100.0)
    months = 0 if loyalty < REBELLION_THRESHOLD else rep.months_since_last_rebellion + 1
    return rep.model_copy(
        update={"loyalty": loyalty, "months_since_last_rebellion": months}
    )


def update_population(
    population: list[Representative], ctx: LoyaltyContext
) -> list[Representative]:
    """Rewrite the whole population for one turn, preserving order and ids."""
    return [update_loyalty(rep, ctx) for rep in population]


def shift_loyalty(
    population: list[Representative], delta: float
) -> list[Representative]:
    """Apply a uniform loyalty shock (intervention outcome, regime switch)."""
    if not delta:
        return list(population)
    return [
        rep.model_copy(update={"loyalty": clamp(rep.loyalty + delta, 0.0, 100.0)})
        for rep in population
    ]
