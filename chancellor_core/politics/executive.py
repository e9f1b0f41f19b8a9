"""
Executive Relationship — the Chancellor's standing with the Prime Minister.

A small state machine sits on top of three bounded scalars:

- TRUST: how much the PM backs the Chancellor's judgement, moved every
  turn by backbench mood, public approval and crisis penalties
- PATIENCE: how long the PM will tolerate poor results, with harsher and
  more granular tiers than trust; the main driver of reshuffle risk
- RESHUFFLE RISK: the chance the Chancellor is moved, built from patience,
  poor-performance streaks, warnings, overdue demands and defiance

States:
    Quiet               → no pending intervention, no reshuffle
    InterventionPending → exactly one forced choice queued
    Terminated          → ReshuffleEvent created; absorbing

Interventions are raised in fixed priority order (backbench revolt,
manifesto breach, approval collapse, economic crisis) and only the first
matching trigger fires. The terminal check runs exactly once per turn.

References:
    Intervention consequences — comply vs defy tables below
    Terminal condition — two consecutive critical turns
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

from chancellor_core.model.schema import (
    TRUST_HISTORY_LENGTH,
    AngerLevel,
    ApprovalTrend,
    ConsequenceSet,
    Demand,
    DemandCategory,
    ExecutiveRelationship,
    InterventionChoice,
    InterventionEvent,
    InterventionOutcome,
    InterventionReason,
    PreconditionViolation,
    ReshuffleCause,
    ReshuffleEvent,
    SimulationState,
    clamp,
)

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════
# Thresholds
# ════════════════════════════════════════════════════════════════

MOOD_BASELINE = 60.0
APPROVAL_BASELINE = 40.0
UNEMPLOYMENT_CRISIS = 8.0
DEBT_CRISIS_PCT = 110.0
GILT_CRISIS_PCT = 6.0
NHS_QUALITY_FLOOR = 60.0

INTERVENTION_TRUST_CEILING = 40.0
REVOLT_READY_COUNT = 30
MANIFESTO_TRIGGER_CHANCE = 0.3
APPROVAL_COLLAPSE_LEVEL = 30.0

CRITICAL_TRUST = 15.0
CRITICAL_PATIENCE = 10.0
CRITICAL_RESHUFFLE_RISK = 95.0
TERMINAL_SUSTAIN_TURNS = 2

DEFIANCE_DECAY_PER_TURN = 5.0
OVERDUE_DEMAND_MEMORY_TURNS = 12

DEFICIT_DEMAND_TARGET_BN = 50.0
DEMAND_DEADLINE_TURNS = 3


@dataclass(frozen=True)
class ExecutiveInputs:
    """Everything the PM looks at when reviewing a turn."""

    turn: int
    backbench_mood: float
    rebellion_ready: int
    approval: float
    approval_trend: ApprovalTrend
    unemployment_rate: float
    debt_pct_gdp: float
    gilt_yield_10y: float
    nhs_quality: float
    deficit_bn: float
    total_breaches: int
    unaddressed_breaches: int

    @classmethod
    def from_state(cls, state: SimulationState) -> ExecutiveInputs:
        return cls(
            turn=state.turn,
            backbench_mood=state.sentiment.overall_mood,
            rebellion_ready=state.sentiment.rebellion_ready,
            approval=state.polling.national_approval,
            approval_trend=state.polling.trend,
            unemployment_rate=state.economy.unemployment_rate,
            debt_pct_gdp=state.fiscal.debt_pct_gdp,
            gilt_yield_10y=state.economy.gilt_yield_10y,
            nhs_quality=state.services.nhs_quality,
            deficit_bn=state.fiscal.deficit_bn,
            total_breaches=state.manifesto.total,
            unaddressed_breaches=state.manifesto.unaddressed,
        )


@dataclass(frozen=True)
class ConsequenceSpec:
    """Comply / defy deltas for one intervention reason."""

    comply: ConsequenceSet
    defy_trust: float
    defy_backbench: float
    defy_risk_severe: float
    defy_risk_normal: float
    severe_trust_below: float = 30.0

    def defy(self, trust: float) -> ConsequenceSet:
        severe = trust < self.severe_trust_below
        return ConsequenceSet(
            trust_delta=self.defy_trust,
            backbench_delta=self.defy_backbench,
            reshuffle_risk_delta=self.defy_risk_severe if severe else self.defy_risk_normal,
        )


CONSEQUENCES: dict[InterventionReason, ConsequenceSpec] = {
    InterventionReason.BACKBENCH_REVOLT: ConsequenceSpec(
        comply=ConsequenceSet(trust_delta=10, backbench_delta=15, approval_delta=2),
        defy_trust=-15, defy_backbench=-10, defy_risk_severe=60, defy_risk_normal=30,
    ),
    InterventionReason.MANIFESTO_BREACH: ConsequenceSpec(
        comply=ConsequenceSet(trust_delta=8, backbench_delta=10, approval_delta=1),
        defy_trust=-12, defy_backbench=-8, defy_risk_severe=50, defy_risk_normal=25,
    ),
    InterventionReason.APPROVAL_COLLAPSE: ConsequenceSpec(
        comply=ConsequenceSet(trust_delta=8, backbench_delta=12, approval_delta=3),
        defy_trust=-10, defy_backbench=-12, defy_risk_severe=55, defy_risk_normal=25,
    ),
    InterventionReason.ECONOMIC_CRISIS: ConsequenceSpec(
        comply=ConsequenceSet(trust_delta=12, backbench_delta=5, approval_delta=1),
        defy_trust=-20, defy_backbench=-5, defy_risk_severe=70, defy_risk_normal=40,
        severe_trust_below=25.0,
    ),
}


def anger_for(trust: float) -> AngerLevel:
    if trust < 25:
        return AngerLevel.FURIOUS
    if trust < 35:
        return AngerLevel.ANGRY
    return AngerLevel.CONCERNED


class ExecutiveRelationshipManager:
    """
    Drives the PM relationship through one turn and resolves interventions.

    The manager holds no run state. Every method takes an
    ExecutiveRelationship and returns a new one, so the orchestrator can
    work on copies for projections.
    """

    def __init__(
        self,
        intervention_trust_ceiling: float = INTERVENTION_TRUST_CEILING,
        terminal_sustain_turns: int = TERMINAL_SUSTAIN_TURNS,
    ) -> None:
        self.intervention_trust_ceiling = intervention_trust_ceiling
        self.terminal_sustain_turns = terminal_sustain_turns

    # ── Turn processing ─────────────────────────────────────────

    def process_turn(
        self,
        relationship: ExecutiveRelationship,
        inputs: ExecutiveInputs,
        rng: random.Random,
        allocate_id: Callable[[str], str],
    ) -> ExecutiveRelationship:
        """
        Run the PM's monthly review.

        Order: trust, patience, demands, reshuffle risk, intervention
        triggers, terminal check. A terminated relationship is returned
        unchanged.
        """
        if relationship.reshuffle is not None:
            return relationship

        rel = self.update_trust(relationship, inputs)
        rel = self.update_patience(rel, inputs)
        rel = self.review_demands(rel, inputs)
        rel = self.update_reshuffle_risk(rel, inputs.turn)

        if rel.pending_intervention is None:
            reason = self.detect_trigger(rel, inputs, rng)
            if reason is not None:
                rel = self.raise_intervention(rel, reason, inputs, allocate_id(reason.value))

        return self.check_terminal(rel, inputs.turn)

    def update_trust(
        self, relationship: ExecutiveRelationship, inputs: ExecutiveInputs
    ) -> ExecutiveRelationship:
        change = (inputs.backbench_mood - MOOD_BASELINE) * 0.08
        change += (inputs.approval - APPROVAL_BASELINE) * 0.05
        if inputs.unemployment_rate > UNEMPLOYMENT_CRISIS:
            change -= 2
        if inputs.debt_pct_gdp > DEBT_CRISIS_PCT:
            change -= 2
        if inputs.gilt_yield_10y > GILT_CRISIS_PCT:
            change -= 2
        if inputs.nhs_quality < NHS_QUALITY_FLOOR:
            change -= 1

        trust = clamp(relationship.trust + change, 0.0, 100.0)
        history = (relationship.trust_history + [trust])[-TRUST_HISTORY_LENGTH:]
        return relationship.model_copy(update={"trust": trust, "trust_history": history})

    def update_patience(
        self, relationship: ExecutiveRelationship, inputs: ExecutiveInputs
    ) -> ExecutiveRelationship:
        patience = relationship.patience
        trust = relationship.trust
        streak = relationship.consecutive_poor_performance

        if inputs.turn > 12 and trust < 65:
            patience -= 0.5

        if trust < 20:
            patience -= 8
        elif trust < 30:
            patience -= 5
        elif trust < 45:
            patience -= 2
        elif trust > 75:
            patience += 4
        elif trust > 60:
            patience += 2
        streak = streak + 1 if trust < 45 else 0

        if inputs.approval < 20:
            patience -= 5
        elif inputs.approval < 30:
            patience -= 3
        elif inputs.approval < 38:
            patience -= 1
        elif inputs.approval > 50:
            patience += 2

        if inputs.deficit_bn > 100:
            patience -= 4
        elif inputs.deficit_bn > 80:
            patience -= 2
        elif inputs.deficit_bn < 30:
            patience += 1

        if inputs.total_breaches >= 3:
            patience -= 2
        elif inputs.total_breaches >= 1:
            patience -= 1

        return relationship.model_copy(
            update={
                "patience": clamp(patience, 0.0, 100.0),
                "consecutive_poor_performance": streak,
            }
        )

    def review_demands(
        self, relationship: ExecutiveRelationship, inputs: ExecutiveInputs
    ) -> ExecutiveRelationship:
        """Mark active demands met or breached. Never before their check turn."""
        demands: list[Demand] = []
        met_count = relationship.demands_met
        for demand in relationship.demands:
            if demand.active and inputs.turn >= demand.check_turn:
                if inputs.deficit_bn <= demand.target_bn:
                    demand = demand.model_copy(update={"met": True})
                    met_count += 1
                    logger.info("PM demand %s met on turn %d", demand.id, inputs.turn)
                elif inputs.turn > demand.deadline_turn:
                    demand = demand.model_copy(update={"breached": True})
                    logger.warning(
                        "PM demand %s breached on turn %d", demand.id, inputs.turn
                    )
            demands.append(demand)
        return relationship.model_copy(
            update={"demands": demands, "demands_met": met_count}
        )

    def update_reshuffle_risk(
        self, relationship: ExecutiveRelationship, turn: int
    ) -> ExecutiveRelationship:
        defiance = max(0.0, relationship.defiance_risk - DEFIANCE_DECAY_PER_TURN)
        rel = relationship.model_copy(update={"defiance_risk": defiance})
        return rel.model_copy(update={"reshuffle_risk": self.reshuffle_risk(rel, turn)})

    def reshuffle_risk(self, relationship: ExecutiveRelationship, turn: int) -> float:
        risk = 0.0
        if relationship.patience < 20:
            risk += 50
        elif relationship.patience < 40:
            risk += 25

        if relationship.consecutive_poor_performance >= 6:
            risk += 30
        elif relationship.consecutive_poor_performance >= 3:
            risk += 15

        if relationship.warnings_issued >= 3:
            risk += 20
        elif relationship.warnings_issued >= 2:
            risk += 10

        overdue = [
            d for d in relationship.demands
            if d.breached and turn - d.deadline_turn <= OVERDUE_DEMAND_MEMORY_TURNS
        ]
        risk += 15 * len(overdue)
        risk += relationship.defiance_risk
        return clamp(risk, 0.0, 100.0)

    # ── Interventions ───────────────────────────────────────────

    def detect_trigger(
        self,
        relationship: ExecutiveRelationship,
        inputs: ExecutiveInputs,
        rng: random.Random,
    ) -> InterventionReason | None:
        """First matching trigger in priority order, or None."""
        if relationship.trust > self.intervention_trust_ceiling:
            return None
        if inputs.rebellion_ready > REVOLT_READY_COUNT:
            return InterventionReason.BACKBENCH_REVOLT
        if inputs.unaddressed_breaches > 0 and rng.random() < MANIFESTO_TRIGGER_CHANCE:
            return InterventionReason.MANIFESTO_BREACH
        if (
            inputs.approval < APPROVAL_COLLAPSE_LEVEL
            and inputs.approval_trend == ApprovalTrend.FALLING
        ):
            return InterventionReason.APPROVAL_COLLAPSE
        if (
            inputs.unemployment_rate > UNEMPLOYMENT_CRISIS
            or inputs.debt_pct_gdp > DEBT_CRISIS_PCT
        ):
            return InterventionReason.ECONOMIC_CRISIS
        return None

    def raise_intervention(
        self,
        relationship: ExecutiveRelationship,
        reason: InterventionReason,
        inputs: ExecutiveInputs,
        event_id: str,
    ) -> ExecutiveRelationship:
        if relationship.pending_intervention is not None:
            # At most one pending event; a new trigger is dropped.
            return relationship

        spec = CONSEQUENCES[reason]
        event = InterventionEvent(
            id=event_id,
            turn=inputs.turn,
            reason=reason,
            anger=anger_for(relationship.trust),
            payload={
                "trust": relationship.trust,
                "rebellion_ready": float(inputs.rebellion_ready),
                "approval": inputs.approval,
                "unemployment_rate": inputs.unemployment_rate,
                "debt_pct_gdp": inputs.debt_pct_gdp,
                "manifesto_breaches": float(inputs.total_breaches),
            },
            comply=spec.comply,
            defy=spec.defy(relationship.trust),
        )
        logger.warning(
            "PM intervention raised: %s (%s) on turn %d",
            reason.value, event.anger.value, inputs.turn,
        )
        return relationship.model_copy(update={"pending_intervention": event})

    def resolve(
        self,
        relationship: ExecutiveRelationship,
        choice: InterventionChoice,
        turn: int,
    ) -> tuple[ExecutiveRelationship, InterventionOutcome, ConsequenceSet]:
        """
        Apply the chosen consequence set and clear the pending event.

        Only trust and reshuffle risk live on the relationship; the caller
        applies the backbench and approval deltas.

        Raises:
            PreconditionViolation: If the run is over or nothing is pending.
        """
        if relationship.reshuffle is not None:
            raise PreconditionViolation(
                "Cannot resolve an intervention after the Chancellor has been reshuffled"
            )
        event = relationship.pending_intervention
        if event is None:
            raise PreconditionViolation("No intervention is pending")

        consequence = event.comply if choice == InterventionChoice.COMPLY else event.defy
        defiance = clamp(
            relationship.defiance_risk + consequence.reshuffle_risk_delta, 0.0, 100.0
        )
        outcome = InterventionOutcome(
            event_id=event.id, reason=event.reason, choice=choice, turn=turn
        )
        updated = relationship.model_copy(
            update={
                "trust": clamp(relationship.trust + consequence.trust_delta, 0.0, 100.0),
                "defiance_risk": defiance,
                "reshuffle_risk": clamp(
                    relationship.reshuffle_risk + consequence.reshuffle_risk_delta,
                    0.0,
                    100.0,
                ),
                "pending_intervention": None,
                "intervention_history": relationship.intervention_history + [outcome],
            }
        )
        logger.info(
            "Intervention %s resolved: %s (trust %.1f -> %.1f)",
            event.id, choice.value, relationship.trust, updated.trust,
        )
        return updated, outcome, consequence

    # ── Terminal condition ──────────────────────────────────────

    def critical_cause(self, relationship: ExecutiveRelationship) -> ReshuffleCause | None:
        if relationship.trust < CRITICAL_TRUST:
            return ReshuffleCause.TRUST_COLLAPSE
        if relationship.patience < CRITICAL_PATIENCE:
            return ReshuffleCause.PATIENCE_EXHAUSTED
        if relationship.reshuffle_risk >= CRITICAL_RESHUFFLE_RISK:
            return ReshuffleCause.RESHUFFLE_RISK
        return None

    def check_terminal(
        self, relationship: ExecutiveRelationship, turn: int
    ) -> ExecutiveRelationship:
        """Count consecutive critical turns; create the ReshuffleEvent once sustained."""
        if relationship.reshuffle is not None:
            return relationship

        cause = self.critical_cause(relationship)
        if cause is None:
            return relationship.model_copy(update={"critical_turns": 0})

        critical_turns = relationship.critical_turns + 1
        if critical_turns < self.terminal_sustain_turns:
            return relationship.model_copy(update={"critical_turns": critical_turns})

        reshuffle = ReshuffleEvent(
            turn=turn,
            cause=cause,
            trust=relationship.trust,
            patience=relationship.patience,
            reshuffle_risk=relationship.reshuffle_risk,
        )
        logger.critical(
            "Chancellor reshuffled on turn %d: %s (trust %.1f, patience %.1f)",
            turn, cause.value, relationship.trust, relationship.patience,
        )
        return relationship.model_copy(
            update={
                "critical_turns": critical_turns,
                "reshuffle": reshuffle,
                "pending_intervention": None,
            }
        )

    # ── Demands ─────────────────────────────────────────────────

    def issue_deficit_demand(
        self, relationship: ExecutiveRelationship, turn: int, demand_id: str
    ) -> ExecutiveRelationship:
        demand = Demand(
            id=demand_id,
            category=DemandCategory.DEFICIT_REDUCTION,
            target_bn=DEFICIT_DEMAND_TARGET_BN,
            issued_turn=turn,
            check_turn=turn + 1,
            deadline_turn=turn + DEMAND_DEADLINE_TURNS,
        )
        return relationship.model_copy(
            update={
                "demands": relationship.demands + [demand],
                "demands_issued": relationship.demands_issued + 1,
            }
        )
