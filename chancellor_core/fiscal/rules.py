"""
Fiscal Rule Evaluator — headroom and compliance under the active fiscal framework.

Seven mutually exclusive regimes each redefine what a compliant budget is.
Every regime is evaluated the same way:

- HEADROOM: a signed £bn distance from the regime's binding constraint,
  computed by one function per regime tag (positive = slack, negative = breach)
- SUB-TESTS: current budget, overall balance, deficit ceiling, debt target
  and debt falling, each reported individually so the narrative layer can
  cite the specific breach
- VERDICT: the logical AND of every sub-test

Everything here is a pure function of (regime, economic aggregates, fiscal
aggregates). Nothing reads or writes simulation state, which is what lets
the orchestrator call it for what-if projections.

References:
    Charter for Budget Responsibility — current budget rule, debt falling
    OBR headroom calibration (£9.9bn certified at the start of the term)
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from chancellor_core.model.schema import (
    ComplianceVerdict,
    EconomicAggregates,
    FiscalAggregates,
    FiscalRegime,
    FiscalRegimeId,
    RuleEvaluation,
)

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Calibration
# ════════════════════════════════════════════════════════════════

# Reconciles the in-year current balance with the multi-year forecast
# baseline the game opens on.
OBR_HEADROOM_CALIBRATION_BN = -14.8

# A budget this close to the line still counts as meeting the rule.
COMPLIANCE_TOLERANCE_BN = -0.5

# Regimes with a rolling horizon at least this long judge debt-falling on
# the forecast path rather than on the actual year-on-year change.
FORWARD_LOOKING_HORIZON_YEARS = 4


# ════════════════════════════════════════════════════════════════
# Headroom per regime tag
# ════════════════════════════════════════════════════════════════


def _current_budget_headroom(
    regime: FiscalRegime, economy: EconomicAggregates, fiscal: FiscalAggregates
) -> float:
    return fiscal.current_budget_balance_bn + OBR_HEADROOM_CALIBRATION_BN


def _deficit_ceiling_headroom(
    regime: FiscalRegime, economy: EconomicAggregates, fiscal: FiscalAggregates
) -> float:
    ceiling = regime.deficit_ceiling_pct or 0.0
    return (ceiling - fiscal.deficit_pct_gdp) * economy.gdp_nominal_bn / 100


def _overall_balance_headroom(
    regime: FiscalRegime, economy: EconomicAggregates, fiscal: FiscalAggregates
) -> float:
    return fiscal.overall_balance_bn


def _no_constraint_headroom(
    regime: FiscalRegime, economy: EconomicAggregates, fiscal: FiscalAggregates
) -> float:
    return 0.0


HeadroomFn = Callable[[FiscalRegime, EconomicAggregates, FiscalAggregates], float]

HEADROOM_BY_REGIME: dict[FiscalRegimeId, HeadroomFn] = {
    FiscalRegimeId.STARMER_REEVES: _current_budget_headroom,
    FiscalRegimeId.GOLDEN_RULE: _current_budget_headroom,
    FiscalRegimeId.DEBT_ANCHOR: _current_budget_headroom,
    FiscalRegimeId.JEREMY_HUNT: _deficit_ceiling_headroom,
    FiscalRegimeId.MAASTRICHT: _deficit_ceiling_headroom,
    FiscalRegimeId.BALANCED_BUDGET: _overall_balance_headroom,
    FiscalRegimeId.MMT_INSPIRED: _no_constraint_headroom,
}


def calculate_headroom(
    regime: FiscalRegime, economy: EconomicAggregates, fiscal: FiscalAggregates
) -> float:
    """Signed headroom in £bn for the given regime."""
    return HEADROOM_BY_REGIME[regime.id](regime, economy, fiscal)


# ════════════════════════════════════════════════════════════════
# Evaluation
# ════════════════════════════════════════════════════════════════


def evaluate(
    regime: FiscalRegime,
    economy: EconomicAggregates,
    fiscal: FiscalAggregates,
) -> RuleEvaluation:
    """
    Evaluate the fiscal position against a regime.

    Args:
        regime: The active fiscal framework.
        economy: Current macro aggregates (nominal GDP is used for ratios).
        fiscal: Current public finances, with ratios already refreshed.

    Returns:
        RuleEvaluation with signed headroom and the per-test verdict.
    """
    headroom = calculate_headroom(regime, economy, fiscal)

    current_budget_met = (
        not regime.requires_current_budget_balance
        or headroom >= COMPLIANCE_TOLERANCE_BN
    )
    overall_balance_met = (
        not regime.requires_overall_balance
        or fiscal.overall_balance_bn >= COMPLIANCE_TOLERANCE_BN
    )
    deficit_ceiling_met = (
        regime.deficit_ceiling_pct is None
        or fiscal.deficit_pct_gdp <= regime.deficit_ceiling_pct
    )
    debt_target_met = (
        regime.debt_target_pct is None
        or fiscal.debt_pct_gdp <= regime.debt_target_pct
    )
    debt_falling_met = _debt_falling_met(
        regime, fiscal, headroom, deficit_ceiling_met
    )

    checks = {
        "current_budget": current_budget_met,
        "overall_balance": overall_balance_met,
        "deficit_ceiling": deficit_ceiling_met,
        "debt_target": debt_target_met,
        "debt_falling": debt_falling_met,
    }
    failed = [name for name, met in checks.items() if not met]

    verdict = ComplianceVerdict(
        current_budget_met=current_budget_met,
        overall_balance_met=overall_balance_met,
        deficit_ceiling_met=deficit_ceiling_met,
        debt_target_met=debt_target_met,
        debt_falling_met=debt_falling_met,
        overall_compliant=not failed,
        failed_tests=failed,
        current_budget_gap_bn=max(0.0, -fiscal.current_budget_balance_bn),
        capital_investment_bn=fiscal.capital_spending_bn,
    )
    if failed:
        logger.debug(
            "Fiscal rules breached under %s: %s (headroom %.1fbn)",
            regime.id.value, ", ".join(failed), headroom,
        )
    return RuleEvaluation(regime_id=regime.id, headroom_bn=headroom, compliance=verdict)


def _debt_falling_met(
    regime: FiscalRegime,
    fiscal: FiscalAggregates,
    headroom: float,
    deficit_ceiling_met: bool,
) -> bool:
    if not regime.requires_debt_falling:
        return True
    if regime.horizon_years >= FORWARD_LOOKING_HORIZON_YEARS:
        # Forecast path: debt falls in the target year if the primary test passes.
        if regime.deficit_ceiling_pct is not None:
            return deficit_ceiling_met
        return headroom >= COMPLIANCE_TOLERANCE_BN
    return fiscal.debt_pct_gdp <= fiscal.previous_debt_pct_gdp


def project(
    regime: FiscalRegime,
    scenarios: Iterable[tuple[EconomicAggregates, FiscalAggregates]],
) -> list[RuleEvaluation]:
    """Evaluate a sequence of hypothetical positions without touching live state."""
    return [evaluate(regime, economy, fiscal) for economy, fiscal in scenarios]


# ════════════════════════════════════════════════════════════════
# Aggregate helpers
# ════════════════════════════════════════════════════════════════


def refresh_ratios(
    fiscal: FiscalAggregates, economy: EconomicAggregates
) -> FiscalAggregates:
    """Return a copy of `fiscal` with deficit and debt ratios recomputed from GDP."""
    gdp = economy.gdp_nominal_bn
    return fiscal.model_copy(
        update={
            "deficit_pct_gdp": fiscal.deficit_bn / gdp * 100,
            "debt_pct_gdp": fiscal.debt_nominal_bn / gdp * 100,
        }
    )


def accrue_monthly_borrowing(
    fiscal: FiscalAggregates, economy: EconomicAggregates
) -> FiscalAggregates:
    """Add one month of borrowing to the debt stock and refresh ratios."""
    debt = max(0.0, fiscal.debt_nominal_bn + fiscal.deficit_bn / 12)
    rolled = fiscal.model_copy(
        update={
            "debt_nominal_bn": debt,
            "previous_debt_pct_gdp": fiscal.debt_pct_gdp,
        }
    )
    return refresh_ratios(rolled, economy)
