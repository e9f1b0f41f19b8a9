"""
PM Communications — which message, if any, No. 10 sends this turn.

At most one message per turn. Event-driven messages are checked in a fixed
priority order and the first that qualifies wins; a scheduled check-in is
only sent when nothing else qualifies. The chosen message type is then
rendered from the content catalogue.

Sending a message has side effects on the relationship: contact is logged,
warnings and threats are counted, a demand message opens a deficit demand,
and support changes flip the withdrawn flag.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Sequence

from chancellor_core.content.catalogue import ContentCatalogue, ContentContext, render
from chancellor_core.model.schema import (
    DemandCategory,
    ExecutiveRelationship,
    MessageType,
    PMMessage,
)
from chancellor_core.politics.executive import ExecutiveInputs, ExecutiveRelationshipManager

logger = logging.getLogger(__name__)

FINAL_WARNING_RISK = 80.0
LOW_TRUST = 30.0
LOW_TRUST_CONTACT_GAP = 2
LOW_APPROVAL = 25.0
CONCERN_CONTACT_GAP = 3
DEMAND_DEFICIT_BN = 80.0
PRAISE_TRUST = 75.0
PRAISE_APPROVAL = 50.0
PRAISE_CONTACT_GAP = 4
WITHDRAW_SUPPORT_RISK = 60.0
RESTORE_SUPPORT_RISK = 30.0
RESTORE_SUPPORT_TRUST = 50.0
FIRST_CHECKIN_TURN = 3
CHECKIN_INTERVAL = 6

SUPPORT_WITHDRAWN = "support_withdrawn"
SUPPORT_RESTORED = "support_restored"


@dataclass(frozen=True)
class MessageDecision:
    type: MessageType
    reason: str | None = None


def turns_since_contact(relationship: ExecutiveRelationship, turn: int) -> int:
    if relationship.last_contact_turn < 0:
        return turn + 1
    return turn - relationship.last_contact_turn


def decide_message(
    relationship: ExecutiveRelationship, inputs: ExecutiveInputs
) -> MessageDecision | None:
    """Pick the message type for this turn, or None for silence."""
    turn = inputs.turn
    gap = turns_since_contact(relationship, turn)

    if relationship.reshuffle_risk >= FINAL_WARNING_RISK and not relationship.final_warning_given:
        return MessageDecision(MessageType.RESHUFFLE_WARNING)

    if relationship.trust < LOW_TRUST and gap >= LOW_TRUST_CONTACT_GAP:
        if relationship.warnings_issued == 0:
            return MessageDecision(MessageType.WARNING)
        return MessageDecision(MessageType.THREAT)

    if inputs.approval < LOW_APPROVAL and gap >= CONCERN_CONTACT_GAP:
        return MessageDecision(MessageType.CONCERN)

    has_deficit_demand = any(
        d.category == DemandCategory.DEFICIT_REDUCTION
        for d in relationship.active_demands()
    )
    if inputs.deficit_bn > DEMAND_DEFICIT_BN and not has_deficit_demand:
        return MessageDecision(MessageType.DEMAND)

    if (
        relationship.trust > PRAISE_TRUST
        and inputs.approval > PRAISE_APPROVAL
        and gap >= PRAISE_CONTACT_GAP
        and relationship.consecutive_poor_performance == 0
    ):
        return MessageDecision(MessageType.PRAISE)

    if (
        relationship.reshuffle_risk >= WITHDRAW_SUPPORT_RISK
        and not relationship.support_withdrawn
        and relationship.warnings_issued >= 2
    ):
        return MessageDecision(MessageType.SUPPORT_CHANGE, SUPPORT_WITHDRAWN)

    if (
        relationship.support_withdrawn
        and relationship.reshuffle_risk < RESTORE_SUPPORT_RISK
        and relationship.trust > RESTORE_SUPPORT_TRUST
    ):
        return MessageDecision(MessageType.SUPPORT_CHANGE, SUPPORT_RESTORED)

    if should_send_checkin(relationship, turn):
        return MessageDecision(MessageType.REGULAR_CHECKIN)
    return None


def should_send_checkin(relationship: ExecutiveRelationship, turn: int) -> bool:
    if relationship.last_contact_turn < 0:
        return turn >= FIRST_CHECKIN_TURN
    return turn - relationship.last_contact_turn >= CHECKIN_INTERVAL


def message_variables(inputs: ExecutiveInputs, ctx: ContentContext, trust: float) -> dict[str, object]:
    return {
        "trust": f"{trust:.0f}",
        "approval": f"{inputs.approval:.1f}",
        "growth": f"{ctx.gdp_growth:.1f}",
        "deficit": f"{inputs.deficit_bn:.1f}",
        "backbench": f"{inputs.backbench_mood:.0f}",
        "month": ctx.month,
    }


class CommunicationsOffice:
    """Chooses, renders and records the PM's message for a turn."""

    def __init__(
        self,
        catalogue: ContentCatalogue,
        manager: ExecutiveRelationshipManager,
    ) -> None:
        self.catalogue = catalogue
        self.manager = manager

    def process_turn(
        self,
        relationship: ExecutiveRelationship,
        inputs: ExecutiveInputs,
        ctx: ContentContext,
        rng: random.Random,
        corpus: Sequence[str],
        allocate_id: Callable[[str], str],
    ) -> tuple[ExecutiveRelationship, PMMessage | None]:
        decision = decide_message(relationship, inputs)
        if decision is None:
            return relationship, None

        template = self.catalogue.message_template(
            decision.type, ctx, rng, corpus, reason=decision.reason
        )
        variables = message_variables(inputs, ctx, relationship.trust)
        message = PMMessage(
            id=allocate_id("pm"),
            turn=inputs.turn,
            type=decision.type,
            tone=template.tone,
            subject=render(template.subject, variables),
            body=render(template.body, variables),
            template_id=template.id,
            reason=decision.reason,
        )
        updated = self._record(relationship, decision, inputs.turn, allocate_id)
        logger.info(
            "PM message on turn %d: %s (%s)",
            inputs.turn, decision.type.value, template.id,
        )
        return updated, message

    def _record(
        self,
        relationship: ExecutiveRelationship,
        decision: MessageDecision,
        turn: int,
        allocate_id: Callable[[str], str],
    ) -> ExecutiveRelationship:
        update: dict[str, object] = {"last_contact_turn": turn}
        if decision.type in (MessageType.WARNING, MessageType.THREAT):
            update["warnings_issued"] = relationship.warnings_issued + 1
        elif decision.type == MessageType.RESHUFFLE_WARNING:
            update["final_warning_given"] = True
        elif decision.type == MessageType.SUPPORT_CHANGE:
            update["support_withdrawn"] = decision.reason == SUPPORT_WITHDRAWN

        updated = relationship.model_copy(update=update)
        if decision.type == MessageType.DEMAND:
            updated = self.manager.issue_deficit_demand(updated, turn, allocate_id("demand"))
        return updated
