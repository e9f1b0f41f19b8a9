"""Default content tables: PM messages, headlines, quotes, happenings."""

from __future__ import annotations

from chancellor_core.content.catalogue import (
    ContentConditions as When,
    HappeningTemplate,
    HeadlineTemplate,
    HeadlineVersion as V,
    InterventionCopy,
    MessageTemplate,
    QuoteTemplate,
)
from chancellor_core.model.schema import (
    AngerLevel,
    HappeningType,
    InterventionReason,
    MessageTone,
    MessageType,
    OutletBias as B,
    ReshuffleCause,
    Severity,
)


# ════════════════════════════════════════════════════════════════
# Messages from No. 10
# ════════════════════════════════════════════════════════════════

MESSAGE_TEMPLATES: list[MessageTemplate] = [
    # Scheduled check-ins
    MessageTemplate(
        id="checkin-strong",
        type=MessageType.REGULAR_CHECKIN,
        tone=MessageTone.SUPPORTIVE,
        subject="Catch-up in the flat",
        body=(
            "Good month, Chancellor. Trust in the Treasury is at {trust} and the "
            "party is holding together at {backbench}. Keep growth at {growth}% "
            "heading the right way."
        ),
        conditions=When(min_trust=60),
    ),
    MessageTemplate(
        id="checkin-steady",
        type=MessageType.REGULAR_CHECKIN,
        tone=MessageTone.NEUTRAL,
        subject="Regular catch-up",
        body=(
            "Quick word for {month}. We are polling at {approval}% and borrowing "
            "is running at {deficit}bn. Let's keep talking."
        ),
        conditions=When(min_trust=35, max_trust=60),
    ),
    MessageTemplate(
        id="checkin-strained",
        type=MessageType.REGULAR_CHECKIN,
        tone=MessageTone.STERN,
        subject="We need to talk",
        body=(
            "I won't pretend this is going well. Approval is {approval}% and the "
            "backbenches are at {backbench}. I need to see a plan."
        ),
        conditions=When(max_trust=35),
    ),
    # Warnings and threats
    MessageTemplate(
        id="warning-first",
        type=MessageType.WARNING,
        tone=MessageTone.STERN,
        subject="A word of warning",
        body=(
            "My confidence in the Treasury has fallen to {trust}. Colleagues are "
            "asking questions I cannot keep answering. Treat this as a formal warning."
        ),
    ),
    MessageTemplate(
        id="warning-backbench",
        type=MessageType.WARNING,
        tone=MessageTone.STERN,
        subject="The party is restless",
        body=(
            "The Whips tell me backbench mood is down to {backbench}. That lands "
            "on my desk, and it is landing on yours now. Fix it."
        ),
    ),
    MessageTemplate(
        id="threat-final-chance",
        type=MessageType.THREAT,
        tone=MessageTone.ANGRY,
        subject="Last chance",
        body=(
            "I warned you. Trust is at {trust} and approval at {approval}%. If "
            "things do not change quickly I will find someone who can change them."
        ),
    ),
    MessageTemplate(
        id="threat-replacement",
        type=MessageType.THREAT,
        tone=MessageTone.ANGRY,
        subject="Your position",
        body=(
            "There are people in the Cabinet who would like your job, and I am "
            "starting to listen to them. Trust stands at {trust}."
        ),
    ),
    # Demands
    MessageTemplate(
        id="demand-deficit",
        type=MessageType.DEMAND,
        tone=MessageTone.STERN,
        subject="Borrowing must come down",
        body=(
            "Borrowing of {deficit}bn is not sustainable. I want it below 50bn "
            "within three months. This is not a request."
        ),
    ),
    # Concern
    MessageTemplate(
        id="concern-polling",
        type=MessageType.CONCERN,
        tone=MessageTone.NEUTRAL,
        subject="The polls",
        body=(
            "We are at {approval}% and falling. People feel the squeeze. What can "
            "the Treasury do in the next budget?"
        ),
    ),
    MessageTemplate(
        id="concern-seats",
        type=MessageType.CONCERN,
        tone=MessageTone.STERN,
        subject="Marginal seats",
        body=(
            "At {approval}% we lose a lot of good colleagues at the next election. "
            "I need you thinking about the marginals."
        ),
    ),
    # Praise
    MessageTemplate(
        id="praise-strong-month",
        type=MessageType.PRAISE,
        tone=MessageTone.SUPPORTIVE,
        subject="Well done",
        body=(
            "Approval at {approval}% and growth at {growth}%. This is exactly what "
            "we promised. Thank you."
        ),
    ),
    MessageTemplate(
        id="praise-party",
        type=MessageType.PRAISE,
        tone=MessageTone.SUPPORTIVE,
        subject="The party is behind you",
        body=(
            "Backbench mood is at {backbench}. The Whips have never had it so easy. "
            "Keep it up."
        ),
    ),
    # Support changes
    MessageTemplate(
        id="support-withdrawn",
        type=MessageType.SUPPORT_CHANGE,
        tone=MessageTone.ANGRY,
        subject="You are on your own",
        reason="support_withdrawn",
        body=(
            "From today I will not defend Treasury policy in public. If you want "
            "my backing again, earn it."
        ),
    ),
    MessageTemplate(
        id="support-restored",
        type=MessageType.SUPPORT_CHANGE,
        tone=MessageTone.SUPPORTIVE,
        subject="Back on side",
        reason="support_restored",
        body=(
            "You have turned this around. Trust is back to {trust} and you have "
            "my full support again."
        ),
        conditions=When(support_withdrawn=True),
    ),
    # Final notice
    MessageTemplate(
        id="reshuffle-final-notice",
        type=MessageType.RESHUFFLE_WARNING,
        tone=MessageTone.ANGRY,
        subject="Reshuffle",
        body=(
            "I am planning a reshuffle. Unless something changes dramatically "
            "before {month}, you will not be Chancellor at the end of it."
        ),
    ),
]


# ════════════════════════════════════════════════════════════════
# Headlines
# ════════════════════════════════════════════════════════════════


def _all_outlets(headline: str, subheading: str) -> dict[B, V]:
    return {bias: V(headline=headline, subheading=subheading) for bias in B}


HEADLINES: list[HeadlineTemplate] = [
    HeadlineTemplate(
        id="recession",
        priority=95,
        conditions=When(max_gdp_growth=-0.5),
        versions={
            B.LEFT: V(headline="Recession Hits Working Families", subheading="Treasury blamed as output shrinks"),
            B.CENTRE_LEFT: V(headline="Economy Contracts, Recession Fears Grow", subheading="Chancellor under pressure to act"),
            B.CENTRE_RIGHT: V(headline="Britain Slides Towards Recession", subheading="Business confidence at a low"),
            B.RIGHT: V(headline="Labour's Recession", subheading="Growth goes into reverse"),
            B.POPULIST_RIGHT: V(headline="SHRINKING BRITAIN", subheading="Economy in freefall"),
            B.FINANCIAL: V(headline="UK Output Contracts", subheading="Gilts rally as rate cut bets build"),
        },
    ),
    HeadlineTemplate(
        id="inflation-surge",
        priority=90,
        conditions=When(min_inflation=5.0),
        versions={
            B.LEFT: V(headline="Prices Soar as Wages Lag", subheading="Calls for help with bills"),
            B.CENTRE_LEFT: V(headline="Inflation Climbs Again", subheading="Households feel the squeeze"),
            B.CENTRE_RIGHT: V(headline="Inflation Spike Tests Treasury", subheading="Bank signals more tightening"),
            B.RIGHT: V(headline="Inflation Out of Control", subheading="Spending splurge blamed"),
            B.POPULIST_RIGHT: V(headline="COST OF LIVING AGONY", subheading="Shopping bills rocket"),
            B.FINANCIAL: V(headline="CPI Overshoots Forecasts", subheading="Markets price further hikes"),
        },
    ),
    HeadlineTemplate(
        id="unemployment-crisis",
        priority=88,
        conditions=When(min_unemployment=7.0),
        versions=_all_outlets(
            "Dole Queues Lengthen", "Unemployment reaches a multi-year high"
        ),
    ),
    HeadlineTemplate(
        id="debt-alarm",
        priority=80,
        conditions=When(min_debt_pct=105.0),
        versions={
            B.LEFT: V(headline="Debt Row Masks Investment Gap", subheading="Economists urge patience"),
            B.CENTRE_LEFT: V(headline="Debt Passes Size of Economy", subheading="Fiscal rules under strain"),
            B.CENTRE_RIGHT: V(headline="Debt Mountain Keeps Growing", subheading="Treasury credibility questioned"),
            B.RIGHT: V(headline="Chancellor Maxes Out the Nation's Card", subheading="Debt spirals"),
            B.POPULIST_RIGHT: V(headline="BROKE BRITAIN", subheading="Debt hits record"),
            B.FINANCIAL: V(headline="Debt Ratio Breaches 105%", subheading="Term premium widens"),
        },
    ),
    HeadlineTemplate(
        id="borrowing-overshoot",
        priority=70,
        conditions=When(min_deficit_pct=4.0),
        versions=_all_outlets(
            "Borrowing Overshoots Forecast", "Treasury blames weaker receipts"
        ),
    ),
    HeadlineTemplate(
        id="polling-slump",
        priority=65,
        conditions=When(max_approval=30.0),
        versions={
            B.LEFT: V(headline="Voters Lose Patience", subheading="Party members demand change"),
            B.CENTRE_LEFT: V(headline="Government Support Slumps", subheading="Backbenchers grow nervous"),
            B.CENTRE_RIGHT: V(headline="Polls Point to Heavy Defeat", subheading="Cabinet divisions surface"),
            B.RIGHT: V(headline="Labour in Meltdown", subheading="Worst ratings in a generation"),
            B.POPULIST_RIGHT: V(headline="NOBODY BELIEVES THEM", subheading="Ratings hit rock bottom"),
            B.FINANCIAL: V(headline="Political Risk Rises", subheading="Investors eye early election"),
        },
    ),
    HeadlineTemplate(
        id="boom",
        priority=60,
        conditions=When(min_gdp_growth=2.5, max_inflation=3.5),
        versions={
            B.LEFT: V(headline="Growth Returns, But Who Benefits?", subheading="Unions press for pay rises"),
            B.CENTRE_LEFT: V(headline="Economy Picks Up Speed", subheading="Chancellor hails turning point"),
            B.CENTRE_RIGHT: V(headline="Strong Growth Surprises Forecasters", subheading="Treasury claims credit"),
            B.RIGHT: V(headline="Growth Despite the Chancellor", subheading="Business shrugs off tax rises"),
            B.POPULIST_RIGHT: V(headline="BOOM TIME", subheading="Economy roars back"),
            B.FINANCIAL: V(headline="GDP Beats Consensus", subheading="Sterling firms"),
        },
    ),
    HeadlineTemplate(
        id="steady-state",
        priority=20,
        conditions=When(min_gdp_growth=0.0, max_inflation=4.0, max_unemployment=6.0),
        versions=_all_outlets(
            "Steady as She Goes at the Treasury", "Few surprises in the latest figures"
        ),
    ),
]


# ════════════════════════════════════════════════════════════════
# Opposition Quotes
# ════════════════════════════════════════════════════════════════

OPPOSITION_QUOTES: list[QuoteTemplate] = [
    QuoteTemplate(
        id="quote-growth-stalled",
        quote="Growth has stalled, and the Chancellor has run out of excuses.",
        speaker="Shadow Chancellor",
        conditions=When(max_gdp_growth=0.5),
    ),
    QuoteTemplate(
        id="quote-prices",
        quote="Prices keep rising, and families are paying for Treasury failure.",
        speaker="Shadow Chancellor",
        conditions=When(min_inflation=3.5),
    ),
    QuoteTemplate(
        id="quote-debt",
        quote="Debt keeps climbing, and our children will be paying it off.",
        speaker="Shadow Chief Secretary",
        conditions=When(min_debt_pct=95.0),
    ),
    QuoteTemplate(
        id="quote-jobs",
        quote="Every month, more people out of work and no plan to help them.",
        speaker="Shadow Work and Pensions Secretary",
        conditions=When(min_unemployment=5.5),
    ),
    QuoteTemplate(
        id="quote-polls",
        quote="Even their own backbenchers have stopped believing them.",
        speaker="Leader of the Opposition",
        conditions=When(max_approval=35.0),
    ),
    QuoteTemplate(
        id="quote-generic-taxes",
        quote="This government promised not to raise your taxes, and you know how that went.",
        speaker="Leader of the Opposition",
    ),
    QuoteTemplate(
        id="quote-generic-plan",
        quote="Where is the plan? The country deserves to know.",
        speaker="Liberal Democrat Treasury Spokesperson",
    ),
]


# ════════════════════════════════════════════════════════════════
# Happenings
# ════════════════════════════════════════════════════════════════

HAPPENINGS: list[HappeningTemplate] = [
    HappeningTemplate(
        id="gilt-wobble",
        type=HappeningType.ECONOMIC,
        severity=Severity.MODERATE,
        probability=0.15,
        title="Gilt market wobble after weak auction",
        conditions=When(min_debt_pct=100.0),
        approval_impact=-1.0,
        trust_impact=-2.0,
    ),
    HappeningTemplate(
        id="nhs-winter-crisis",
        type=HappeningType.CRISIS,
        severity=Severity.MAJOR,
        probability=0.08,
        title="NHS winter crisis dominates the news",
        approval_impact=-2.0,
        trust_impact=-1.0,
    ),
    HappeningTemplate(
        id="minister-expenses",
        type=HappeningType.SCANDAL,
        severity=Severity.MINOR,
        probability=0.05,
        title="Junior minister caught in expenses row",
        approval_impact=-1.0,
    ),
    HappeningTemplate(
        id="donor-row",
        type=HappeningType.SCANDAL,
        severity=Severity.MODERATE,
        probability=0.03,
        title="Party donor row engulfs Downing Street",
        approval_impact=-2.0,
        trust_impact=-1.0,
    ),
    HappeningTemplate(
        id="strike-wave",
        type=HappeningType.CRISIS,
        severity=Severity.MODERATE,
        probability=0.10,
        title="Public sector unions announce coordinated strikes",
        conditions=When(min_inflation=4.0),
        approval_impact=-1.5,
    ),
    HappeningTemplate(
        id="jobs-boost",
        type=HappeningType.ECONOMIC,
        severity=Severity.MINOR,
        probability=0.10,
        title="Car maker announces new plant and 3,000 jobs",
        conditions=When(min_gdp_growth=1.5),
        approval_impact=1.0,
        trust_impact=1.0,
    ),
    HappeningTemplate(
        id="think-tank-report",
        type=HappeningType.COMMENTARY,
        severity=Severity.MINOR,
        probability=0.12,
        title="Think tank warns of black hole in the public finances",
        conditions=When(min_deficit_pct=3.5),
        approval_impact=-0.5,
    ),
    HappeningTemplate(
        id="imf-praise",
        type=HappeningType.COMMENTARY,
        severity=Severity.MINOR,
        probability=0.06,
        title="IMF praises UK fiscal framework",
        conditions=When(max_deficit_pct=3.0),
        trust_impact=1.0,
    ),
]


# ════════════════════════════════════════════════════════════════
# Interventions and Reshuffles
# ════════════════════════════════════════════════════════════════

INTERVENTION_COPY: dict[InterventionReason, dict[AngerLevel, InterventionCopy]] = {
    InterventionReason.BACKBENCH_REVOLT: {
        AngerLevel.FURIOUS: InterventionCopy(
            title="Backbench Rebellion Brewing",
            description=(
                "Dozens of MPs are threatening to vote against the budget. The PM "
                "wants concessions on the measures they object to, today."
            ),
        ),
    },
    InterventionReason.MANIFESTO_BREACH: {
        AngerLevel.ANGRY: InterventionCopy(
            title="Manifesto Promises Broken",
            description=(
                "The PM is furious that manifesto commitments have been broken and "
                "wants a corrective budget that puts them right."
            ),
        ),
        AngerLevel.FURIOUS: InterventionCopy(
            title="The Manifesto Is Not Optional",
            description=(
                "Broken pledges are now the story. The PM demands they are reversed "
                "before the next Cabinet meeting."
            ),
        ),
    },
    InterventionReason.APPROVAL_COLLAPSE: {
        AngerLevel.CONCERNED: InterventionCopy(
            title="Government Approval Collapsing",
            description=(
                "Polling has fallen below 30% and is still dropping. The PM wants "
                "popular measures in the next fiscal event."
            ),
        ),
    },
    InterventionReason.ECONOMIC_CRISIS: {
        AngerLevel.CONCERNED: InterventionCopy(
            title="Economic Crisis Response Required",
            description=(
                "Unemployment or debt has passed crisis levels. The PM wants an "
                "emergency package and a change of course."
            ),
        ),
    },
}

RESHUFFLE_NARRATIVES: dict[ReshuffleCause, str] = {
    ReshuffleCause.TRUST_COLLAPSE: (
        "The Prime Minister has lost all confidence in the Treasury. You are "
        "asked to return your seals of office."
    ),
    ReshuffleCause.PATIENCE_EXHAUSTED: (
        "After months of poor results the Prime Minister has run out of "
        "patience. A new Chancellor is appointed this afternoon."
    ),
    ReshuffleCause.RESHUFFLE_RISK: (
        "Warnings ignored and demands unmet: you are moved out of the Treasury "
        "in the reshuffle."
    ),
}
