"""
Public Opinion — national and regional approval of the government.

Approval drifts toward a structural level set by the economy, public
services and broken pledges, and is buffeted each month by media scrutiny
and noise. The first year carries a steady honeymoon decay; a budget buys
a bounce that halves every month.

All randomness comes from the generator passed in by the orchestrator.
"""

from __future__ import annotations

import random

from chancellor_core.model.schema import (
    ApprovalTrend,
    EconomicAggregates,
    ManifestoBreaches,
    PollingState,
    Region,
    ServiceQuality,
    clamp,
)

APPROVAL_FLOOR = 15.0
APPROVAL_CEILING = 70.0
STRUCTURAL_BASELINE = 42.0
ADJUSTMENT_SPEED = 0.2
NOISE_WEIGHT = 0.3
HONEYMOON_TURNS = 12
HONEYMOON_DECAY = -0.6
BUDGET_BOUNCE = 3.0
TREND_THRESHOLD = 0.5

NORTHERN_IRELAND_BASELINE = 40.0

# (offset from national, half-width of noise)
REGIONAL_OFFSETS: dict[Region, tuple[float, float]] = {
    Region.ENGLAND: (0.0, 1.0),
    Region.SCOTLAND: (-8.0, 1.5),
    Region.WALES: (-2.0, 1.0),
}


def clamp_approval(value: float) -> float:
    return clamp(value, APPROVAL_FLOOR, APPROVAL_CEILING)


def economic_factor(economy: EconomicAggregates) -> float:
    score = (
        economy.gdp_growth_annual * 1.5
        - max(0.0, economy.unemployment_rate - 5.0) * 2
        - max(0.0, economy.inflation_cpi - 3.0) * 1.5
    )
    return clamp(score / 3, -10.0, 10.0)


def service_factor(services: ServiceQuality) -> float:
    average = (
        services.nhs_quality * 2
        + services.education_quality
        + services.infrastructure_quality
    ) / 4
    return clamp((average - 65) * 0.15, -10.0, 10.0)


def manifesto_factor(manifesto: ManifestoBreaches) -> float:
    return max(-15.0, -3.0 * manifesto.total)


def structural_approval(
    economy: EconomicAggregates,
    services: ServiceQuality,
    manifesto: ManifestoBreaches,
) -> float:
    """The level approval would settle at if nothing else happened."""
    return clamp_approval(
        STRUCTURAL_BASELINE
        + economic_factor(economy)
        + service_factor(services)
        + manifesto_factor(manifesto)
    )


def update_polling(
    polling: PollingState,
    economy: EconomicAggregates,
    services: ServiceQuality,
    manifesto: ManifestoBreaches,
    turn: int,
    rng: random.Random,
) -> PollingState:
    """Advance approval by one month."""
    target = structural_approval(economy, services, manifesto)
    media = (rng.random() - 0.6) * 10 * NOISE_WEIGHT
    noise = (rng.random() - 0.5) * 6 * NOISE_WEIGHT
    honeymoon = HONEYMOON_DECAY if turn <= HONEYMOON_TURNS else 0.0

    change = (
        (target - polling.national_approval) * ADJUSTMENT_SPEED
        + media
        + noise
        + honeymoon
        + polling.post_budget_bounce
    )
    national = clamp_approval(polling.national_approval + change)

    regional: dict[Region, float] = {}
    for region, (offset, spread) in REGIONAL_OFFSETS.items():
        jitter = (rng.random() - 0.5) * 2 * spread
        regional[region] = clamp_approval(national + offset + jitter)
    regional[Region.NORTHERN_IRELAND] = clamp_approval(
        NORTHERN_IRELAND_BASELINE + (rng.random() - 0.5) * 5
    )

    if change > TREND_THRESHOLD:
        trend = ApprovalTrend.RISING
    elif change < -TREND_THRESHOLD:
        trend = ApprovalTrend.FALLING
    else:
        trend = ApprovalTrend.STABLE

    return PollingState(
        national_approval=national,
        previous_national_approval=polling.national_approval,
        regional_approval=regional,
        trend=trend,
        post_budget_bounce=polling.post_budget_bounce * 0.5,
    )


def shift_approval(polling: PollingState, delta: float) -> PollingState:
    """Apply a one-off approval shock to the national and regional figures."""
    if not delta:
        return polling
    return polling.model_copy(
        update={
            "national_approval": clamp_approval(polling.national_approval + delta),
            "regional_approval": {
                region: clamp_approval(value + delta)
                for region, value in polling.regional_approval.items()
            },
        }
    )


def add_budget_bounce(polling: PollingState) -> PollingState:
    return polling.model_copy(
        update={"post_budget_bounce": polling.post_budget_bounce + BUDGET_BOUNCE}
    )
