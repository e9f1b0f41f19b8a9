"""
Simulation Schema — Pydantic models for every entity of the political-fiscal core.

These models are the canonical data structures of a Chancellor's term in
office. They govern the shape of data passed between the fiscal rule
evaluator, the backbench loyalty model, the executive relationship state
machine, the turn orchestrator, the save-game store, and the dashboard API.
Every model is plain serializable data: a `SimulationState` dumped with
`model_dump(mode="json")` and validated back is the same state.

Bounded scalars (loyalty, trust, patience, reshuffle risk, approval) carry
`Field(ge=, le=)` constraints; code that mutates them clamps at the point
of mutation with `clamp()` so validation never has to reject a value that
the engine itself produced.

References:
    Fiscal frameworks — current budget, deficit ceiling, balanced budget rules
    Backbench model   — 200 representatives, ideology / marginality / loyalty
    Executive model   — PM trust, patience, reshuffle risk, interventions
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field, computed_field


# ════════════════════════════════════════════════════════════════
# Constants
# ════════════════════════════════════════════════════════════════

POPULATION_SIZE = 200
TERM_LENGTH_TURNS = 60  # Five years of monthly turns
TRUST_HISTORY_LENGTH = 24
INDICATOR_HISTORY_LENGTH = 24
MESSAGE_HISTORY_LENGTH = 36
CONTENT_CORPUS_LENGTH = 18
STATE_FORMAT_VERSION = 1


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a numeric value into the inclusive range [low, high]."""
    return max(low, min(high, value))


# ════════════════════════════════════════════════════════════════
# Enumerations
# ════════════════════════════════════════════════════════════════


class FiscalRegimeId(str, enum.Enum):
    """The closed set of fiscal frameworks a Chancellor may govern under."""

    STARMER_REEVES = "starmer-reeves"
    JEREMY_HUNT = "jeremy-hunt"
    GOLDEN_RULE = "golden-rule"
    MAASTRICHT = "maastricht"
    BALANCED_BUDGET = "balanced-budget"
    DEBT_ANCHOR = "debt-anchor"
    MMT_INSPIRED = "mmt-inspired"


class Region(str, enum.Enum):
    """Nations of the UK a constituency can sit in."""

    ENGLAND = "england"
    SCOTLAND = "scotland"
    WALES = "wales"
    NORTHERN_IRELAND = "northern_ireland"


class Faction(str, enum.Enum):
    """Ideological partitions of the parliamentary party."""

    LEFT = "left"
    CENTRE = "centre"
    RIGHT = "right"
    ALL = "all"  # Systemic rather than factional discontent


class RebellionRisk(str, enum.Enum):
    """Five-level classification driven by the rebellion-ready count."""

    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class ApprovalTrend(str, enum.Enum):
    RISING = "rising"
    STABLE = "stable"
    FALLING = "falling"


class InterventionReason(str, enum.Enum):
    """Why the Prime Minister is forcing a choice on the Chancellor."""

    BACKBENCH_REVOLT = "backbench_revolt"
    MANIFESTO_BREACH = "manifesto_breach"
    APPROVAL_COLLAPSE = "approval_collapse"
    ECONOMIC_CRISIS = "economic_crisis"


class AngerLevel(str, enum.Enum):
    CONCERNED = "concerned"
    ANGRY = "angry"
    FURIOUS = "furious"


class InterventionChoice(str, enum.Enum):
    COMPLY = "comply"
    DEFY = "defy"


class MessageType(str, enum.Enum):
    """Communications the Prime Minister's office can send."""

    REGULAR_CHECKIN = "regular_checkin"
    WARNING = "warning"
    THREAT = "threat"
    DEMAND = "demand"
    CONCERN = "concern"
    PRAISE = "praise"
    SUPPORT_CHANGE = "support_change"
    RESHUFFLE_WARNING = "reshuffle_warning"  # Final notice before removal


class MessageTone(str, enum.Enum):
    SUPPORTIVE = "supportive"
    NEUTRAL = "neutral"
    STERN = "stern"
    ANGRY = "angry"


class DemandCategory(str, enum.Enum):
    DEFICIT_REDUCTION = "deficit_reduction"


class ReshuffleCause(str, enum.Enum):
    """What finally cost the Chancellor their job."""

    TRUST_COLLAPSE = "trust_collapse"
    PATIENCE_EXHAUSTED = "patience_exhausted"
    RESHUFFLE_RISK = "reshuffle_risk"


class RunStatus(str, enum.Enum):
    """Coarse run state surfaced to presentation layers."""

    ACTIVE = "active"
    INTERVENTION_PENDING = "intervention_pending"  # Needs a player choice
    TERMINATED = "terminated"  # Game over: removed from office
    TERM_COMPLETE = "term_complete"  # Survived the full term


class OutletBias(str, enum.Enum):
    """Editorial slant a headline version is written for."""

    LEFT = "left"
    CENTRE_LEFT = "centre-left"
    CENTRE_RIGHT = "centre-right"
    RIGHT = "right"
    POPULIST_RIGHT = "populist-right"
    FINANCIAL = "financial"


class HappeningType(str, enum.Enum):
    CRISIS = "crisis"
    SCANDAL = "scandal"
    ECONOMIC = "economic"
    COMMENTARY = "commentary"


class Severity(str, enum.Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


# ════════════════════════════════════════════════════════════════
# Fiscal Models
# ════════════════════════════════════════════════════════════════


class RegimeReaction(BaseModel):
    """One-off political shock applied when a regime is adopted mid-term."""

    model_config = {"frozen": True}

    trust: float = 0.0
    backbench: float = 0.0
    approval: float = 0.0


class FiscalRegime(BaseModel):
    """
    Immutable definition of a fiscal framework.

    Exactly one regime is active per game. Evaluation is dispatched on `id`
    by the fiscal rule evaluator; the boolean and optional numeric fields
    describe which sub-tests apply.
    """

    model_config = {"frozen": True}

    id: FiscalRegimeId
    name: str
    requires_current_budget_balance: bool = False
    requires_overall_balance: bool = False
    deficit_ceiling_pct: float | None = Field(
        default=None, description="Maximum overall deficit, % of GDP"
    )
    debt_target_pct: float | None = Field(
        default=None, description="Maximum debt ratio, % of GDP"
    )
    requires_debt_falling: bool = False
    investment_exempt: bool = False
    horizon_years: int = Field(default=0, ge=0, description="Rolling target horizon")
    gilt_yield_offset: float = 0.0
    sterling_offset: float = 0.0
    backbench_drift_target: float = Field(default=55.0, ge=0, le=100)
    reaction: RegimeReaction = Field(default_factory=RegimeReaction)


class EconomicAggregates(BaseModel):
    """Headline macro indicators the political model reacts to."""

    gdp_nominal_bn: float = Field(default=2750.0, gt=0)
    gdp_growth_annual: float = 1.0
    inflation_cpi: float = 2.2
    unemployment_rate: float = Field(default=4.2, ge=0, le=100)
    gilt_yield_10y: float = Field(default=4.1, ge=0)


class ServiceQuality(BaseModel):
    """Public service quality indices, 0–100."""

    nhs_quality: float = Field(default=45.0, ge=0, le=100)
    education_quality: float = Field(default=58.0, ge=0, le=100)
    infrastructure_quality: float = Field(default=48.0, ge=0, le=100)


class TaxRates(BaseModel):
    """Headline tax rates covered by the manifesto tax lock, in percent."""

    income_tax_basic: float = Field(default=20.0, ge=0, le=100)
    vat: float = Field(default=20.0, ge=0, le=100)
    ni_employee: float = Field(default=8.0, ge=0, le=100)


class FiscalAggregates(BaseModel):
    """
    Public finances in £bn per year.

    `total_spending_bn` includes capital spending but excludes debt interest.
    Ratios to GDP are stored rather than computed so they can be refreshed
    against the economic aggregates by the orchestrator each turn.
    """

    regime_id: FiscalRegimeId = FiscalRegimeId.STARMER_REEVES
    total_revenue_bn: float = Field(default=1137.2, ge=0)
    total_spending_bn: float = Field(default=1100.0, ge=0)
    capital_spending_bn: float = Field(default=82.5, ge=0)
    debt_interest_bn: float = Field(default=95.0, ge=0)
    debt_nominal_bn: float = Field(default=2540.0, ge=0)
    deficit_pct_gdp: float = 2.1
    debt_pct_gdp: float = 92.4
    previous_debt_pct_gdp: float = 92.4
    tax_rates: TaxRates = Field(default_factory=TaxRates)
    locked_tax_rates: TaxRates = Field(
        default_factory=TaxRates, description="Manifesto tax-lock baseline"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def deficit_bn(self) -> float:
        """Overall borrowing: spending plus debt interest less revenue."""
        return self.total_spending_bn + self.debt_interest_bn - self.total_revenue_bn

    @computed_field  # type: ignore[prop-decorator]
    @property
    def current_budget_balance_bn(self) -> float:
        """Revenue less day-to-day spending and debt interest."""
        current_spending = self.total_spending_bn - self.capital_spending_bn
        return self.total_revenue_bn - current_spending - self.debt_interest_bn

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_balance_bn(self) -> float:
        return self.total_revenue_bn - self.total_spending_bn - self.debt_interest_bn


class ComplianceVerdict(BaseModel):
    """Structured result of a fiscal rule check; each sub-test reported individually."""

    current_budget_met: bool = True
    overall_balance_met: bool = True
    deficit_ceiling_met: bool = True
    debt_target_met: bool = True
    debt_falling_met: bool = True
    overall_compliant: bool = True
    failed_tests: list[str] = Field(default_factory=list)
    current_budget_gap_bn: float = Field(default=0.0, ge=0)
    capital_investment_bn: float = 0.0


class RuleEvaluation(BaseModel):
    """Output of the fiscal rule evaluator."""

    regime_id: FiscalRegimeId
    headroom_bn: float
    compliance: ComplianceVerdict


# ════════════════════════════════════════════════════════════════
# Backbench Models
# ════════════════════════════════════════════════════════════════


class Representative(BaseModel):
    """
    A backbench MP modelled as an independent agent.

    Only `loyalty` and `months_since_last_rebellion` change after creation,
    and only once per turn.
    """

    id: int = Field(ge=0)
    ideology: float = Field(default=0.0, ge=-2.0, le=2.0, description="-2 left … +2 right")
    marginality: float = Field(
        default=70.0, ge=0, le=100, description="0 ultra-marginal … 100 ultra-safe"
    )
    priority_weight: float = Field(
        default=0.4, ge=0, le=1, description="0 ideology-driven … 1 constituency-driven"
    )
    loyalty: float = Field(default=85.0, ge=0, le=100)
    months_since_last_rebellion: int = Field(default=0, ge=0)
    region: Region = Region.ENGLAND


class FactionMood(BaseModel):
    mood: float = Field(default=60.0, ge=0, le=100)
    count: int = Field(default=0, ge=0)


class SentimentSnapshot(BaseModel):
    """Population-level reduction of backbench loyalty, recomputed every turn."""

    overall_mood: float = Field(default=85.0, ge=0, le=100)
    left: FactionMood = Field(default_factory=FactionMood)
    centre: FactionMood = Field(default_factory=FactionMood)
    right: FactionMood = Field(default_factory=FactionMood)
    rebellion_ready: int = Field(default=0, ge=0, description="Loyalty below 30")
    wavering: int = Field(default=0, ge=0, description="Loyalty 30–60")
    loyal: int = Field(default=0, ge=0, description="Loyalty 60 and above")
    rebellion_risk: RebellionRisk = RebellionRisk.NONE
    worst_faction: Faction = Faction.CENTRE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def population_size(self) -> int:
        return self.left.count + self.centre.count + self.right.count


class PollingState(BaseModel):
    """National and regional approval of the government."""

    national_approval: float = Field(default=45.0, ge=0, le=100)
    previous_national_approval: float = Field(default=45.0, ge=0, le=100)
    regional_approval: dict[Region, float] = Field(
        default_factory=lambda: {
            Region.ENGLAND: 46.0,
            Region.SCOTLAND: 37.0,
            Region.WALES: 43.0,
            Region.NORTHERN_IRELAND: 40.0,
        }
    )
    trend: ApprovalTrend = ApprovalTrend.STABLE
    post_budget_bounce: float = 0.0


class ManifestoBreaches(BaseModel):
    """Running record of broken manifesto pledges."""

    tax_locks: int = Field(default=0, ge=0)
    spending_pledges: int = Field(default=0, ge=0)
    fiscal_rules: int = Field(default=0, ge=0)
    unaddressed: int = Field(
        default=0, ge=0, description="Breaches not yet answered by a corrective budget"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return self.tax_locks + self.spending_pledges + self.fiscal_rules


# ════════════════════════════════════════════════════════════════
# Executive Relationship Models
# ════════════════════════════════════════════════════════════════


class ConsequenceSet(BaseModel):
    """Deterministic deltas applied atomically when an intervention is resolved."""

    trust_delta: float = 0.0
    backbench_delta: float = 0.0
    approval_delta: float = 0.0
    reshuffle_risk_delta: float = 0.0


class InterventionEvent(BaseModel):
    """
    A forced binary choice raised by the Prime Minister.

    Created when trigger conditions hold and nothing is already pending;
    removed when the player complies or defies. There is no partial state.
    """

    id: str
    turn: int = Field(ge=0)
    reason: InterventionReason
    anger: AngerLevel
    title: str = ""
    description: str = ""
    payload: dict[str, float] = Field(default_factory=dict)
    comply: ConsequenceSet
    defy: ConsequenceSet


class InterventionOutcome(BaseModel):
    event_id: str
    reason: InterventionReason
    choice: InterventionChoice
    turn: int = Field(ge=0)


class Demand(BaseModel):
    """A specific target the Prime Minister expects to be met by a deadline."""

    id: str
    category: DemandCategory = DemandCategory.DEFICIT_REDUCTION
    target_bn: float
    issued_turn: int = Field(ge=0)
    check_turn: int = Field(ge=0, description="First turn the target is tested")
    deadline_turn: int = Field(ge=0)
    met: bool = False
    breached: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def active(self) -> bool:
        return not self.met and not self.breached


class PMMessage(BaseModel):
    """A communication from No. 10, rendered from a content template."""

    id: str
    turn: int = Field(ge=0)
    type: MessageType
    tone: MessageTone = MessageTone.NEUTRAL
    subject: str = ""
    body: str = ""
    template_id: str = ""
    reason: str | None = None
    read: bool = False


class ReshuffleEvent(BaseModel):
    """Terminal event: the Chancellor has been removed from office."""

    turn: int = Field(ge=0)
    cause: ReshuffleCause
    trust: float
    patience: float
    reshuffle_risk: float
    narrative: str = ""


class ExecutiveRelationship(BaseModel):
    """
    The Chancellor's standing with the Prime Minister.

    `pending_intervention` is a single optional slot, so at most one
    InterventionEvent can ever be queued. `reshuffle`, once set, is never
    cleared.
    """

    trust: float = Field(default=75.0, ge=0, le=100)
    patience: float = Field(default=70.0, ge=0, le=100)
    reshuffle_risk: float = Field(default=0.0, ge=0, le=100)
    defiance_risk: float = Field(default=0.0, ge=0, le=100)
    consecutive_poor_performance: int = Field(default=0, ge=0)
    critical_turns: int = Field(default=0, ge=0)
    warnings_issued: int = Field(default=0, ge=0)
    demands_issued: int = Field(default=0, ge=0)
    demands_met: int = Field(default=0, ge=0)
    final_warning_given: bool = False
    support_withdrawn: bool = False
    last_contact_turn: int = -1
    demands: list[Demand] = Field(default_factory=list)
    pending_intervention: InterventionEvent | None = None
    intervention_history: list[InterventionOutcome] = Field(default_factory=list)
    reshuffle: ReshuffleEvent | None = None
    trust_history: list[float] = Field(default_factory=list)

    def active_demands(self) -> list[Demand]:
        return [d for d in self.demands if d.active]


# ════════════════════════════════════════════════════════════════
# Content Models
# ════════════════════════════════════════════════════════════════


class HeadlineSelection(BaseModel):
    headline: str
    subheading: str = ""
    template_id: str = ""


class QuoteSelection(BaseModel):
    quote: str
    speaker: str


class Happening(BaseModel):
    """A templated event (crisis, scandal, commentary) that fired this turn."""

    id: str
    template_id: str
    turn: int = Field(ge=0)
    type: HappeningType
    severity: Severity = Severity.MINOR
    title: str = ""
    approval_impact: float = 0.0
    trust_impact: float = 0.0


# ════════════════════════════════════════════════════════════════
# Turn Input / Output
# ════════════════════════════════════════════════════════════════


class PolicyDelta(BaseModel):
    """
    Player-submitted changes applied before a turn is evaluated.

    All fields are relative changes. Results are clamped at their bounds
    (a rate cannot go negative) rather than rejected.
    """

    spending_change_bn: float = 0.0
    capital_spending_change_bn: float = 0.0
    revenue_change_bn: float = 0.0
    debt_interest_change_bn: float = 0.0
    income_tax_basic_change: float = 0.0
    vat_change: float = 0.0
    ni_employee_change: float = 0.0
    gdp_growth_change: float = 0.0
    inflation_change: float = 0.0
    unemployment_change: float = 0.0
    gilt_yield_change: float = 0.0
    nhs_quality_change: float = 0.0
    education_quality_change: float = 0.0
    infrastructure_quality_change: float = 0.0
    regime_id: FiscalRegimeId | None = Field(
        default=None, description="Adopt a different fiscal framework"
    )
    is_budget: bool = Field(default=False, description="Fiscal event with a polling bounce")


class IndicatorSnapshot(BaseModel):
    """One row of the bounded trailing history used for trend display."""

    turn: int = Field(ge=0)
    trust: float
    patience: float
    backbench_mood: float
    approval: float
    headroom_bn: float
    deficit_bn: float
    debt_pct_gdp: float


class SimulationState(BaseModel):
    """
    The full, serializable state of a run.

    `next_event_id` is the only id source; ids are derived from it and it
    only ever increases. Random draws for a turn come from a generator
    seeded with `(seed, turn)`, so replaying a state is deterministic.
    """

    format_version: int = STATE_FORMAT_VERSION
    seed: int = 0
    turn: int = Field(default=0, ge=0)
    start_year: int = 2024
    start_month: int = Field(default=7, ge=1, le=12)
    next_event_id: int = Field(default=1, ge=1)
    economy: EconomicAggregates = Field(default_factory=EconomicAggregates)
    services: ServiceQuality = Field(default_factory=ServiceQuality)
    fiscal: FiscalAggregates = Field(default_factory=FiscalAggregates)
    headroom_bn: float = 9.9
    compliance: ComplianceVerdict = Field(default_factory=ComplianceVerdict)
    consecutive_breaches: int = Field(default=0, ge=0)
    backbenchers: list[Representative] = Field(default_factory=list)
    sentiment: SentimentSnapshot = Field(default_factory=SentimentSnapshot)
    polling: PollingState = Field(default_factory=PollingState)
    manifesto: ManifestoBreaches = Field(default_factory=ManifestoBreaches)
    executive: ExecutiveRelationship = Field(default_factory=ExecutiveRelationship)
    messages: list[PMMessage] = Field(default_factory=list)
    recent_content: list[str] = Field(default_factory=list)
    pending_happenings: list[Happening] = Field(default_factory=list)
    history: list[IndicatorSnapshot] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> RunStatus:
        if self.executive.reshuffle is not None:
            return RunStatus.TERMINATED
        if self.executive.pending_intervention is not None:
            return RunStatus.INTERVENTION_PENDING
        if self.turn >= TERM_LENGTH_TURNS:
            return RunStatus.TERM_COMPLETE
        return RunStatus.ACTIVE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def calendar_label(self) -> str:
        """Calendar month of the current turn, e.g. '2025-03'."""
        months = self.start_month - 1 + self.turn
        return f"{self.start_year + months // 12}-{months % 12 + 1:02d}"

    def allocate_id(self, prefix: str) -> str:
        """Return a fresh id and advance the counter. Mutates this state."""
        event_id = f"{prefix}-{self.next_event_id:05d}"
        self.next_event_id += 1
        return event_id


class TurnSummary(BaseModel):
    """Everything a presentation layer needs to report one processed turn."""

    turn: int
    status: RunStatus
    headroom_bn: float
    compliance: ComplianceVerdict
    sentiment: SentimentSnapshot
    approval: float
    trust: float
    patience: float
    reshuffle_risk: float
    deltas: dict[str, float] = Field(default_factory=dict)
    breaches_recorded: list[str] = Field(default_factory=list)
    message: PMMessage | None = None
    intervention: InterventionEvent | None = None
    reshuffle: ReshuffleEvent | None = None
    headline: HeadlineSelection | None = None
    quote: QuoteSelection | None = None
    happenings: list[Happening] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def terminated(self) -> bool:
        return self.reshuffle is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def needs_choice(self) -> bool:
        return self.intervention is not None


class TurnResult(BaseModel):
    state: SimulationState
    summary: TurnSummary


class ResolutionResult(BaseModel):
    state: SimulationState
    outcome: InterventionOutcome
    applied: ConsequenceSet


# ════════════════════════════════════════════════════════════════
# Errors
# ════════════════════════════════════════════════════════════════


class PreconditionViolation(Exception):
    """Raised when an operation is invalid for the current run state."""
    pass


# ════════════════════════════════════════════════════════════════
# Fiscal Regime Catalogue
# ════════════════════════════════════════════════════════════════

FISCAL_REGIMES: dict[FiscalRegimeId, FiscalRegime] = {
    FiscalRegimeId.STARMER_REEVES: FiscalRegime(
        id=FiscalRegimeId.STARMER_REEVES,
        name="Stability Rule (current budget balance, debt falling)",
        requires_current_budget_balance=True,
        requires_debt_falling=True,
        investment_exempt=True,
        horizon_years=5,
        backbench_drift_target=55.0,
    ),
    FiscalRegimeId.JEREMY_HUNT: FiscalRegime(
        id=FiscalRegimeId.JEREMY_HUNT,
        name="Deficit ceiling of 3% with debt falling",
        deficit_ceiling_pct=3.0,
        requires_debt_falling=True,
        horizon_years=5,
        gilt_yield_offset=-0.05,
        sterling_offset=0.10,
        backbench_drift_target=40.0,
        reaction=RegimeReaction(trust=3.0, backbench=-5.0, approval=-1.0),
    ),
    FiscalRegimeId.GOLDEN_RULE: FiscalRegime(
        id=FiscalRegimeId.GOLDEN_RULE,
        name="Golden Rule (borrow only to invest)",
        requires_current_budget_balance=True,
        investment_exempt=True,
        horizon_years=7,
        gilt_yield_offset=0.03,
        sterling_offset=-0.05,
        backbench_drift_target=62.0,
        reaction=RegimeReaction(trust=-2.0, backbench=3.0, approval=0.0),
    ),
    FiscalRegimeId.MAASTRICHT: FiscalRegime(
        id=FiscalRegimeId.MAASTRICHT,
        name="Maastricht criteria (3% deficit, 60% debt)",
        deficit_ceiling_pct=3.0,
        debt_target_pct=60.0,
        requires_debt_falling=True,
        horizon_years=3,
        gilt_yield_offset=-0.15,
        sterling_offset=0.25,
        backbench_drift_target=38.0,
        reaction=RegimeReaction(trust=2.0, backbench=-8.0, approval=-2.0),
    ),
    FiscalRegimeId.BALANCED_BUDGET: FiscalRegime(
        id=FiscalRegimeId.BALANCED_BUDGET,
        name="Balanced budget every year",
        requires_current_budget_balance=True,
        requires_overall_balance=True,
        requires_debt_falling=True,
        horizon_years=1,
        gilt_yield_offset=-0.15,
        sterling_offset=0.30,
        backbench_drift_target=30.0,
        reaction=RegimeReaction(trust=-5.0, backbench=-20.0, approval=-5.0),
    ),
    FiscalRegimeId.DEBT_ANCHOR: FiscalRegime(
        id=FiscalRegimeId.DEBT_ANCHOR,
        name="Debt anchor (85% of GDP)",
        requires_current_budget_balance=True,
        debt_target_pct=85.0,
        requires_debt_falling=True,
        investment_exempt=True,
        horizon_years=4,
        gilt_yield_offset=-0.10,
        sterling_offset=0.20,
        backbench_drift_target=48.0,
        reaction=RegimeReaction(trust=0.0, backbench=-5.0, approval=-1.0),
    ),
    FiscalRegimeId.MMT_INSPIRED: FiscalRegime(
        id=FiscalRegimeId.MMT_INSPIRED,
        name="No binding fiscal rule",
        investment_exempt=True,
        horizon_years=0,
        gilt_yield_offset=0.25,
        sterling_offset=-0.50,
        backbench_drift_target=70.0,
        reaction=RegimeReaction(trust=-15.0, backbench=12.0, approval=2.0),
    ),
}


def get_regime(regime_id: FiscalRegimeId | str) -> FiscalRegime:
    """Look up a regime definition; raises ValueError for unknown ids."""
    try:
        return FISCAL_REGIMES[FiscalRegimeId(regime_id)]
    except ValueError:
        raise ValueError(f"Unknown fiscal regime: {regime_id}") from None
