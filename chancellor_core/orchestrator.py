"""
Chancellor Core — Turn Orchestrator.

Sequences one monthly turn of the political-fiscal simulation:

1. Apply player policy deltas (and last month's happenings) to the state
2. Evaluate the active fiscal rule
3. Update polling, then every backbencher's loyalty
4. Reduce the population to a sentiment snapshot
5. Run the PM's review: trust, patience, demands, interventions, terminal check
6. Choose the PM's message and this month's headline, quote and happenings

Every public operation takes a SimulationState and returns a new one; the
input is never modified. Randomness for a turn comes from a generator
seeded with (seed, turn), so the same input always yields the same output.

Entry points:
    advance_turn          — "advance turn", optionally with policy deltas
    resolve_intervention  — "comply" or "defy" the pending intervention
    project               — what-if run over copies of the state
"""

from __future__ import annotations

import argparse
import logging
import random

import structlog

from chancellor_core.config import settings
from chancellor_core.content.catalogue import ContentCatalogue, ContentContext
from chancellor_core.fiscal import rules
from chancellor_core.model.schema import (
    CONTENT_CORPUS_LENGTH,
    INDICATOR_HISTORY_LENGTH,
    MESSAGE_HISTORY_LENGTH,
    FiscalRegimeId,
    Happening,
    IndicatorSnapshot,
    InterventionChoice,
    InterventionReason,
    OutletBias,
    PolicyDelta,
    PreconditionViolation,
    ResolutionResult,
    RunStatus,
    SimulationState,
    TurnResult,
    TurnSummary,
    clamp,
    get_regime,
)
from chancellor_core.politics import polling as opinion
from chancellor_core.politics.backbench import (
    LoyaltyContext,
    generate_population,
    shift_loyalty,
    update_population,
)
from chancellor_core.politics.communications import CommunicationsOffice
from chancellor_core.politics.executive import ExecutiveInputs, ExecutiveRelationshipManager
from chancellor_core.politics.sentiment import aggregate

log = structlog.get_logger()

LOCKED_TAXES = ("income_tax_basic", "vat", "ni_employee")


def configure_logging() -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.dev.ConsoleRenderer()
                if settings.log_format != "json"
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def turn_rng(seed: int, turn: int) -> random.Random:
    """The only random source for a turn."""
    return random.Random(f"{seed}:{turn}")


class TurnOrchestrator:
    """
    Runs the simulation one turn at a time.

    Holds configuration and collaborators only; all run state lives in the
    SimulationState values passed in and returned.
    """

    def __init__(
        self,
        catalogue: ContentCatalogue | None = None,
        manager: ExecutiveRelationshipManager | None = None,
        outlet_bias: OutletBias = OutletBias.CENTRE_LEFT,
    ) -> None:
        self.catalogue = catalogue or ContentCatalogue()
        self.manager = manager or ExecutiveRelationshipManager()
        self.communications = CommunicationsOffice(self.catalogue, self.manager)
        self.outlet_bias = outlet_bias

    # ════════════════════════════════════════════════════════════
    # New game
    # ════════════════════════════════════════════════════════════

    def new_game(
        self,
        seed: int | None = None,
        regime_id: FiscalRegimeId | str = FiscalRegimeId.STARMER_REEVES,
    ) -> SimulationState:
        """Create turn-zero state with a freshly generated backbench."""
        if seed is None:
            seed = random.SystemRandom().randrange(2**31)
        regime = get_regime(regime_id)

        state = SimulationState(seed=seed)
        state.fiscal = rules.refresh_ratios(
            state.fiscal.model_copy(update={"regime_id": regime.id}), state.economy
        )
        state.fiscal = state.fiscal.model_copy(
            update={"previous_debt_pct_gdp": state.fiscal.debt_pct_gdp}
        )
        evaluation = rules.evaluate(regime, state.economy, state.fiscal)
        state.headroom_bn = evaluation.headroom_bn
        state.compliance = evaluation.compliance
        state.backbenchers = generate_population(turn_rng(seed, 0))
        state.sentiment = aggregate(state.backbenchers)
        state.executive.trust_history = [state.executive.trust]

        log.info(
            "chancellor_core.game.created",
            seed=seed,
            regime=regime.id.value,
            headroom_bn=round(state.headroom_bn, 1),
        )
        return state

    # ════════════════════════════════════════════════════════════
    # Advance turn
    # ════════════════════════════════════════════════════════════

    def advance_turn(
        self, state: SimulationState, delta: PolicyDelta | None = None
    ) -> TurnResult:
        """
        Process one month.

        Raises:
            PreconditionViolation: If the Chancellor has been reshuffled, an
                intervention is waiting for a choice, or the term is over.
        """
        self._require_playable(state)

        new = state.model_copy(deep=True)
        new.turn += 1
        rng = turn_rng(new.seed, new.turn)
        before = self._indicators(new)

        # 1. Player deltas and last month's happenings
        breaches = self._apply_delta(new, delta or PolicyDelta())
        self._apply_happenings(new)
        new.fiscal = rules.accrue_monthly_borrowing(new.fiscal, new.economy)

        # 2. Fiscal rules
        regime = get_regime(new.fiscal.regime_id)
        evaluation = rules.evaluate(regime, new.economy, new.fiscal)
        was_compliant = new.compliance.overall_compliant
        new.headroom_bn = evaluation.headroom_bn
        new.compliance = evaluation.compliance
        if evaluation.compliance.overall_compliant:
            new.consecutive_breaches = 0
        else:
            new.consecutive_breaches += 1
            if was_compliant:
                self._record_breach(new, "fiscal_rules")
                breaches.append("fiscal_rules")

        # 3. Opinion, then the backbench
        new.polling = opinion.update_polling(
            new.polling, new.economy, new.services, new.manifesto, new.turn, rng
        )
        loyalty_ctx = LoyaltyContext.from_state(new.fiscal, new.polling, new.manifesto)
        new.backbenchers = update_population(new.backbenchers, loyalty_ctx)

        # 4. Sentiment
        new.sentiment = aggregate(new.backbenchers)

        # 5. PM review, including the once-per-turn terminal check
        inputs = ExecutiveInputs.from_state(new)
        new.executive = self.manager.process_turn(
            new.executive, inputs, rng, new.allocate_id
        )

        if new.executive.reshuffle is not None:
            return self._terminal_result(new, before, breaches)

        pending = new.executive.pending_intervention
        if pending is not None and pending.turn == new.turn:
            copy = self.catalogue.intervention_text(pending.reason, pending.anger)
            new.executive = new.executive.model_copy(
                update={
                    "pending_intervention": pending.model_copy(
                        update={"title": copy.title, "description": copy.description}
                    )
                }
            )

        # 6. Communications and content
        content_ctx = self.content_context(new)
        new.executive, message = self.communications.process_turn(
            new.executive, inputs, content_ctx, rng, new.recent_content, new.allocate_id
        )
        headline = self.catalogue.headline(content_ctx, self.outlet_bias, rng, new.recent_content)
        quote = self.catalogue.quote(content_ctx, rng, new.recent_content)
        happenings = [
            Happening(
                id=new.allocate_id("happening"),
                template_id=template.id,
                turn=new.turn,
                type=template.type,
                severity=template.severity,
                title=template.title,
                approval_impact=template.approval_impact,
                trust_impact=template.trust_impact,
            )
            for template in self.catalogue.roll_happenings(content_ctx, rng)
        ]
        new.pending_happenings = happenings

        shown = [headline.headline] + ([quote.quote] if quote else [])
        if message is not None:
            shown.append(message.subject)
            new.messages = (new.messages + [message])[-MESSAGE_HISTORY_LENGTH:]
        new.recent_content = (new.recent_content + shown)[-CONTENT_CORPUS_LENGTH:]
        self._snapshot(new)

        summary = self._summary(new, before, breaches)
        summary.message = message
        summary.intervention = new.executive.pending_intervention
        summary.headline = headline
        summary.quote = quote
        summary.happenings = happenings

        log.info(
            "chancellor_core.turn.advanced",
            turn=new.turn,
            status=new.status.value,
            trust=round(new.executive.trust, 1),
            mood=round(new.sentiment.overall_mood, 1),
            approval=round(new.polling.national_approval, 1),
            headroom_bn=round(new.headroom_bn, 1),
            message=message.type.value if message else None,
        )
        return TurnResult(state=new, summary=summary)

    # ════════════════════════════════════════════════════════════
    # Resolve intervention
    # ════════════════════════════════════════════════════════════

    def resolve_intervention(
        self, state: SimulationState, choice: InterventionChoice | str
    ) -> ResolutionResult:
        """
        Comply with or defy the pending intervention.

        Raises:
            PreconditionViolation: If reshuffled or nothing is pending.
            ValueError: If the choice is not "comply" or "defy".
        """
        choice = InterventionChoice(choice)
        if state.executive.reshuffle is not None:
            raise PreconditionViolation("The run has ended; the Chancellor was reshuffled")

        new = state.model_copy(deep=True)
        new.executive, outcome, applied = self.manager.resolve(
            new.executive, choice, new.turn
        )
        new.backbenchers = shift_loyalty(new.backbenchers, applied.backbench_delta)
        new.sentiment = aggregate(new.backbenchers)
        new.polling = opinion.shift_approval(new.polling, applied.approval_delta)
        if (
            outcome.reason == InterventionReason.MANIFESTO_BREACH
            and choice == InterventionChoice.COMPLY
        ):
            new.manifesto = new.manifesto.model_copy(update={"unaddressed": 0})

        log.info(
            "chancellor_core.intervention.resolved",
            turn=new.turn,
            reason=outcome.reason.value,
            choice=choice.value,
            trust=round(new.executive.trust, 1),
        )
        return ResolutionResult(state=new, outcome=outcome, applied=applied)

    # ════════════════════════════════════════════════════════════
    # What-if projection
    # ════════════════════════════════════════════════════════════

    def project(
        self,
        state: SimulationState,
        turns: int,
        delta: PolicyDelta | None = None,
    ) -> list[TurnSummary]:
        """
        Simulate up to `turns` months ahead without touching `state`.

        The delta is applied on the first projected month only, since its
        fields are relative changes. Projection stops at the first month
        that needs a choice or ends the run.
        """
        summaries: list[TurnSummary] = []
        current = state
        for step in range(turns):
            if current.status != RunStatus.ACTIVE:
                break
            result = self.advance_turn(current, delta if step == 0 else None)
            summaries.append(result.summary)
            current = result.state
        return summaries

    # ════════════════════════════════════════════════════════════
    # Internal
    # ════════════════════════════════════════════════════════════

    def _require_playable(self, state: SimulationState) -> None:
        status = state.status
        if status == RunStatus.TERMINATED:
            raise PreconditionViolation("The run has ended; the Chancellor was reshuffled")
        if status == RunStatus.INTERVENTION_PENDING:
            raise PreconditionViolation(
                "Cannot advance while an intervention is pending; comply or defy first"
            )
        if status == RunStatus.TERM_COMPLETE:
            raise PreconditionViolation("The parliamentary term is complete")

    def _apply_delta(self, state: SimulationState, delta: PolicyDelta) -> list[str]:
        """Apply a clamped policy delta. Returns the manifesto breaches it caused."""
        breaches: list[str] = []
        fiscal = state.fiscal
        # Capital is part of total spending, so a capital change moves both.
        capital = max(0.0, fiscal.capital_spending_bn + delta.capital_spending_change_bn)
        spending = max(
            0.0,
            fiscal.total_spending_bn
            + delta.spending_change_bn
            + (capital - fiscal.capital_spending_bn),
        )
        capital = min(capital, spending)

        old_rates = fiscal.tax_rates
        new_rates = old_rates.model_copy(
            update={
                "income_tax_basic": clamp(old_rates.income_tax_basic + delta.income_tax_basic_change, 0.0, 100.0),
                "vat": clamp(old_rates.vat + delta.vat_change, 0.0, 100.0),
                "ni_employee": clamp(old_rates.ni_employee + delta.ni_employee_change, 0.0, 100.0),
            }
        )
        locked = fiscal.locked_tax_rates
        restored = 0
        for name in LOCKED_TAXES:
            was_above = getattr(old_rates, name) > getattr(locked, name)
            now_above = getattr(new_rates, name) > getattr(locked, name)
            if now_above and not was_above:
                self._record_breach(state, "tax_locks")
                breaches.append("tax_locks")
            elif was_above and not now_above:
                restored += 1
        if restored:
            state.manifesto = state.manifesto.model_copy(
                update={"unaddressed": max(0, state.manifesto.unaddressed - restored)}
            )

        state.fiscal = fiscal.model_copy(
            update={
                "total_spending_bn": spending,
                "capital_spending_bn": capital,
                "total_revenue_bn": max(0.0, fiscal.total_revenue_bn + delta.revenue_change_bn),
                "debt_interest_bn": max(0.0, fiscal.debt_interest_bn + delta.debt_interest_change_bn),
                "tax_rates": new_rates,
            }
        )

        economy = state.economy
        state.economy = economy.model_copy(
            update={
                "gdp_growth_annual": economy.gdp_growth_annual + delta.gdp_growth_change,
                "inflation_cpi": economy.inflation_cpi + delta.inflation_change,
                "unemployment_rate": clamp(economy.unemployment_rate + delta.unemployment_change, 0.0, 100.0),
                "gilt_yield_10y": max(0.0, economy.gilt_yield_10y + delta.gilt_yield_change),
            }
        )

        services = state.services
        state.services = services.model_copy(
            update={
                "nhs_quality": clamp(services.nhs_quality + delta.nhs_quality_change, 0.0, 100.0),
                "education_quality": clamp(services.education_quality + delta.education_quality_change, 0.0, 100.0),
                "infrastructure_quality": clamp(
                    services.infrastructure_quality + delta.infrastructure_quality_change, 0.0, 100.0
                ),
            }
        )

        if delta.regime_id is not None and delta.regime_id != state.fiscal.regime_id:
            self._switch_regime(state, delta.regime_id)
        if delta.is_budget:
            state.polling = opinion.add_budget_bounce(state.polling)
        return breaches

    def _switch_regime(self, state: SimulationState, regime_id: FiscalRegimeId) -> None:
        regime = get_regime(regime_id)
        reaction = regime.reaction
        state.fiscal = state.fiscal.model_copy(update={"regime_id": regime.id})
        state.executive = state.executive.model_copy(
            update={"trust": clamp(state.executive.trust + reaction.trust, 0.0, 100.0)}
        )
        state.backbenchers = shift_loyalty(state.backbenchers, reaction.backbench)
        state.polling = opinion.shift_approval(state.polling, reaction.approval)
        log.info(
            "chancellor_core.regime.switched",
            turn=state.turn,
            regime=regime.id.value,
            trust_delta=reaction.trust,
        )

    def _apply_happenings(self, state: SimulationState) -> None:
        """Land the impacts of happenings that fired last month."""
        for happening in state.pending_happenings:
            state.polling = opinion.shift_approval(state.polling, happening.approval_impact)
            state.executive = state.executive.model_copy(
                update={
                    "trust": clamp(state.executive.trust + happening.trust_impact, 0.0, 100.0)
                }
            )
        state.pending_happenings = []

    def _record_breach(self, state: SimulationState, category: str) -> None:
        manifesto = state.manifesto
        state.manifesto = manifesto.model_copy(
            update={
                category: getattr(manifesto, category) + 1,
                "unaddressed": manifesto.unaddressed + 1,
            }
        )
        log.warning("chancellor_core.manifesto.breach", turn=state.turn, category=category)

    def content_context(self, state: SimulationState) -> ContentContext:
        return ContentContext(
            gdp_growth=state.economy.gdp_growth_annual,
            inflation=state.economy.inflation_cpi,
            unemployment=state.economy.unemployment_rate,
            approval=state.polling.national_approval,
            deficit_pct=state.fiscal.deficit_pct_gdp,
            debt_pct=state.fiscal.debt_pct_gdp,
            trust=state.executive.trust,
            backbench=state.sentiment.overall_mood,
            month=state.calendar_label,
            support_withdrawn=state.executive.support_withdrawn,
        )

    def _indicators(self, state: SimulationState) -> dict[str, float]:
        return {
            "trust": state.executive.trust,
            "patience": state.executive.patience,
            "reshuffle_risk": state.executive.reshuffle_risk,
            "backbench_mood": state.sentiment.overall_mood,
            "approval": state.polling.national_approval,
            "headroom_bn": state.headroom_bn,
        }

    def _snapshot(self, state: SimulationState) -> None:
        row = IndicatorSnapshot(
            turn=state.turn,
            trust=state.executive.trust,
            patience=state.executive.patience,
            backbench_mood=state.sentiment.overall_mood,
            approval=state.polling.national_approval,
            headroom_bn=state.headroom_bn,
            deficit_bn=state.fiscal.deficit_bn,
            debt_pct_gdp=state.fiscal.debt_pct_gdp,
        )
        state.history = (state.history + [row])[-INDICATOR_HISTORY_LENGTH:]

    def _summary(
        self,
        state: SimulationState,
        before: dict[str, float],
        breaches: list[str],
    ) -> TurnSummary:
        after = self._indicators(state)
        return TurnSummary(
            turn=state.turn,
            status=state.status,
            headroom_bn=state.headroom_bn,
            compliance=state.compliance,
            sentiment=state.sentiment,
            approval=state.polling.national_approval,
            trust=state.executive.trust,
            patience=state.executive.patience,
            reshuffle_risk=state.executive.reshuffle_risk,
            deltas={key: after[key] - before[key] for key in after},
            breaches_recorded=breaches,
        )

    def _terminal_result(
        self,
        state: SimulationState,
        before: dict[str, float],
        breaches: list[str],
    ) -> TurnResult:
        reshuffle = state.executive.reshuffle
        assert reshuffle is not None
        reshuffle = reshuffle.model_copy(
            update={"narrative": self.catalogue.reshuffle_narrative(reshuffle.cause)}
        )
        state.executive = state.executive.model_copy(update={"reshuffle": reshuffle})
        state.pending_happenings = []
        self._snapshot(state)

        summary = self._summary(state, before, breaches)
        summary.reshuffle = reshuffle
        log.critical(
            "chancellor_core.reshuffle.fired",
            turn=state.turn,
            cause=reshuffle.cause.value,
            trust=round(reshuffle.trust, 1),
            patience=round(reshuffle.patience, 1),
        )
        return TurnResult(state=state, summary=summary)


# ════════════════════════════════════════════════════════════════
# Headless runner
# ════════════════════════════════════════════════════════════════


def main(argv: list[str] | None = None) -> None:
    """Play a term headlessly, auto-resolving interventions."""
    parser = argparse.ArgumentParser(description="Run the Chancellor simulation headlessly")
    parser.add_argument("--turns", type=int, default=12, help="Months to simulate")
    parser.add_argument("--seed", type=int, default=settings.default_seed)
    parser.add_argument(
        "--regime",
        default=settings.default_regime,
        choices=[r.value for r in FiscalRegimeId],
    )
    parser.add_argument(
        "--choice",
        default=InterventionChoice.COMPLY.value,
        choices=[c.value for c in InterventionChoice],
        help="How to answer every intervention",
    )
    parser.add_argument("--save", default=None, help="Save slot to write when finished")
    args = parser.parse_args(argv)

    configure_logging()
    orchestrator = TurnOrchestrator()
    state = orchestrator.new_game(seed=args.seed, regime_id=args.regime)

    log.info(
        "chancellor_core.orchestrator.starting",
        seed=state.seed,
        regime=args.regime,
        turns=args.turns,
    )

    for _ in range(args.turns):
        if state.status == RunStatus.INTERVENTION_PENDING:
            state = orchestrator.resolve_intervention(state, args.choice).state
        if state.status != RunStatus.ACTIVE:
            break
        state = orchestrator.advance_turn(state).state

    log.info(
        "chancellor_core.orchestrator.finished",
        turn=state.turn,
        status=state.status.value,
        trust=round(state.executive.trust, 1),
    )

    if args.save:
        from chancellor_core.persistence.service import SaveGameService

        service = SaveGameService(settings.database_url)
        service.initialize()
        service.save(args.save, state)
        log.info("chancellor_core.orchestrator.saved", slot=args.save)


if __name__ == "__main__":
    main()
