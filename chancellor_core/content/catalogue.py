"""
Content Catalogue — read-only, condition-indexed lookup tables.

Headlines, opposition quotes, PM message templates and happening templates
are opaque content. The engine supplies the game-state fields a table
declares as conditions and gets back strings; it never writes prose.

Selection among equally valid candidates favours least-recently-used
phrasing: every candidate is scored against a bounded trailing corpus of
what has already been shown, the minimum-score set is kept, and ties are
broken uniformly with the injected random source.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Sequence

from pydantic import BaseModel, Field

from chancellor_core.model.schema import (
    AngerLevel,
    HappeningType,
    HeadlineSelection,
    InterventionReason,
    MessageTone,
    MessageType,
    OutletBias,
    QuoteSelection,
    ReshuffleCause,
    Severity,
)

logger = logging.getLogger(__name__)

MISSING_VALUE = "n/a"
FALLBACK_HEADLINE = HeadlineSelection(
    headline="Politics as Usual in Westminster",
    subheading="A quiet month at the Treasury",
    template_id="fallback",
)
MAX_HAPPENINGS_PER_TURN = 2

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_WHITESPACE = re.compile(r"\s+")


# ════════════════════════════════════════════════════════════════
# Content Models
# ════════════════════════════════════════════════════════════════


class ContentContext(BaseModel):
    """The game-state fields content tables may condition on."""

    gdp_growth: float = 1.0
    inflation: float = 2.2
    unemployment: float = 4.2
    approval: float = 45.0
    deficit_pct: float = 2.1
    debt_pct: float = 92.4
    trust: float = 75.0
    backbench: float = 85.0
    month: str = ""
    party: str = "labour"
    support_withdrawn: bool = False


class ContentConditions(BaseModel):
    """Inclusive numeric bounds plus optional party / support filters."""

    min_gdp_growth: float | None = None
    max_gdp_growth: float | None = None
    min_inflation: float | None = None
    max_inflation: float | None = None
    min_unemployment: float | None = None
    max_unemployment: float | None = None
    min_approval: float | None = None
    max_approval: float | None = None
    min_deficit_pct: float | None = None
    max_deficit_pct: float | None = None
    min_debt_pct: float | None = None
    max_debt_pct: float | None = None
    min_trust: float | None = None
    max_trust: float | None = None
    party: str | None = None
    support_withdrawn: bool | None = None

    def matches(self, ctx: ContentContext) -> bool:
        for name in ("gdp_growth", "inflation", "unemployment", "approval",
                     "deficit_pct", "debt_pct", "trust"):
            value = getattr(ctx, name)
            low = getattr(self, f"min_{name}")
            high = getattr(self, f"max_{name}")
            if low is not None and value < low:
                return False
            if high is not None and value > high:
                return False
        if self.party is not None and self.party != ctx.party:
            return False
        if self.support_withdrawn is not None and self.support_withdrawn != ctx.support_withdrawn:
            return False
        return True


class MessageTemplate(BaseModel):
    id: str
    type: MessageType
    tone: MessageTone = MessageTone.NEUTRAL
    subject: str
    body: str
    reason: str | None = None
    conditions: ContentConditions = Field(default_factory=ContentConditions)


class HeadlineVersion(BaseModel):
    headline: str
    subheading: str = ""


class HeadlineTemplate(BaseModel):
    id: str
    priority: int = Field(default=50, ge=1, le=100)
    conditions: ContentConditions = Field(default_factory=ContentConditions)
    versions: dict[OutletBias, HeadlineVersion]


class QuoteTemplate(BaseModel):
    id: str
    quote: str
    speaker: str
    conditions: ContentConditions = Field(default_factory=ContentConditions)


class HappeningTemplate(BaseModel):
    id: str
    type: HappeningType
    severity: Severity = Severity.MINOR
    probability: float = Field(ge=0, le=1)
    title: str
    conditions: ContentConditions = Field(default_factory=ContentConditions)
    approval_impact: float = 0.0
    trust_impact: float = 0.0


class InterventionCopy(BaseModel):
    title: str
    description: str


FALLBACK_MESSAGE = MessageTemplate(
    id="fallback",
    type=MessageType.REGULAR_CHECKIN,
    subject="Message from No. 10",
    body="The Prime Minister would like a word about {month}.",
)


# ════════════════════════════════════════════════════════════════
# Selection Helpers
# ════════════════════════════════════════════════════════════════


def normalise(text: str) -> str:
    return _WHITESPACE.sub(" ", text.strip().lower())


def key_phrase(text: str) -> str:
    """The part of a line before its first comma."""
    return normalise(text.split(",", 1)[0])


def repetition_score(candidate: str, corpus: Sequence[str]) -> int:
    normalised = normalise(candidate)
    phrase = key_phrase(candidate)
    recent = [normalise(entry) for entry in corpus]
    exact = sum(1 for entry in recent if entry == normalised)
    partial = sum(1 for entry in recent if phrase and phrase in entry)
    return exact * 3 + partial


def pick_least_repeated(
    candidates: Sequence[str], corpus: Sequence[str], rng: random.Random
) -> str:
    """
    Choose the candidate least represented in the trailing corpus.

    Raises:
        ValueError: If there are no candidates.
    """
    if not candidates:
        raise ValueError("No candidates to choose from")
    scores = [repetition_score(c, corpus) for c in candidates]
    best = min(scores)
    shortlist = [c for c, s in zip(candidates, scores) if s == best]
    return shortlist[0] if len(shortlist) == 1 else rng.choice(shortlist)


def render(text: str, variables: dict[str, object]) -> str:
    """Substitute `{name}` placeholders; unknown or empty values render as n/a."""

    def _replace(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        if value is None or value == "":
            return MISSING_VALUE
        return str(value)

    return _PLACEHOLDER.sub(_replace, text)


# ════════════════════════════════════════════════════════════════
# Catalogue
# ════════════════════════════════════════════════════════════════


class ContentCatalogue:
    """
    Lookup over the content tables.

    Pass alternative tables to swap in another content pack; the defaults
    come from `chancellor_core.content.tables`.
    """

    def __init__(
        self,
        messages: list[MessageTemplate] | None = None,
        headlines: list[HeadlineTemplate] | None = None,
        quotes: list[QuoteTemplate] | None = None,
        happenings: list[HappeningTemplate] | None = None,
        intervention_copy: dict[InterventionReason, dict[AngerLevel, InterventionCopy]] | None = None,
        reshuffle_narratives: dict[ReshuffleCause, str] | None = None,
    ) -> None:
        from chancellor_core.content import tables

        self.messages = messages if messages is not None else tables.MESSAGE_TEMPLATES
        self.headlines = headlines if headlines is not None else tables.HEADLINES
        self.quotes = quotes if quotes is not None else tables.OPPOSITION_QUOTES
        self.happenings = happenings if happenings is not None else tables.HAPPENINGS
        self.intervention_copy = (
            intervention_copy if intervention_copy is not None else tables.INTERVENTION_COPY
        )
        self.reshuffle_narratives = (
            reshuffle_narratives
            if reshuffle_narratives is not None
            else tables.RESHUFFLE_NARRATIVES
        )

    def message_template(
        self,
        message_type: MessageType,
        ctx: ContentContext,
        rng: random.Random,
        corpus: Sequence[str] = (),
        reason: str | None = None,
    ) -> MessageTemplate:
        """Best matching template of the type, or the generic fallback."""
        matching = [
            t for t in self.messages
            if t.type == message_type
            and (reason is None or t.reason == reason)
            and t.conditions.matches(ctx)
        ]
        if not matching:
            logger.debug("No %s message template matches", message_type.value)
            return FALLBACK_MESSAGE.model_copy(update={"type": message_type, "reason": reason})
        chosen = pick_least_repeated([t.subject for t in matching], corpus, rng)
        return next(t for t in matching if t.subject == chosen)

    def headline(
        self,
        ctx: ContentContext,
        bias: OutletBias,
        rng: random.Random,
        corpus: Sequence[str] = (),
    ) -> HeadlineSelection:
        """Highest-priority matching headline in the outlet's voice."""
        matching = [
            h for h in self.headlines
            if h.conditions.matches(ctx) and bias in h.versions
        ]
        if not matching:
            return FALLBACK_HEADLINE
        top = max(h.priority for h in matching)
        best = [h for h in matching if h.priority == top]
        chosen = pick_least_repeated(
            [h.versions[bias].headline for h in best], corpus, rng
        )
        template = next(h for h in best if h.versions[bias].headline == chosen)
        version = template.versions[bias]
        return HeadlineSelection(
            headline=version.headline,
            subheading=version.subheading,
            template_id=template.id,
        )

    def quote(
        self, ctx: ContentContext, rng: random.Random, corpus: Sequence[str] = ()
    ) -> QuoteSelection | None:
        matching = [q for q in self.quotes if q.conditions.matches(ctx)]
        if not matching:
            return None
        chosen = pick_least_repeated([q.quote for q in matching], corpus, rng)
        template = next(q for q in matching if q.quote == chosen)
        return QuoteSelection(quote=template.quote, speaker=template.speaker)

    def roll_happenings(
        self, ctx: ContentContext, rng: random.Random
    ) -> list[HappeningTemplate]:
        """Roll every eligible template once against its probability."""
        fired: list[HappeningTemplate] = []
        for template in self.happenings:
            if not template.conditions.matches(ctx):
                continue
            if rng.random() < template.probability:
                fired.append(template)
            if len(fired) >= MAX_HAPPENINGS_PER_TURN:
                break
        return fired

    def intervention_text(
        self, reason: InterventionReason, anger: AngerLevel
    ) -> InterventionCopy:
        by_anger = self.intervention_copy.get(reason, {})
        copy = by_anger.get(anger) or next(iter(by_anger.values()), None)
        if copy is None:
            return InterventionCopy(title=reason.value.replace("_", " ").title(), description="")
        return copy

    def reshuffle_narrative(self, cause: ReshuffleCause) -> str:
        return self.reshuffle_narratives.get(cause, "")
