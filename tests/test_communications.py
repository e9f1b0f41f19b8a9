"""
Tests for PM communications.

Validates:
- Message priority order and contact-gap throttling
- Scheduled check-ins only when nothing else qualifies
- Side effects of sending: contact log, warning count, demands, support flag
- Warning escalating to a threat on the next eligible turn
"""

from __future__ import annotations

import random

from chancellor_core.content.catalogue import ContentCatalogue, ContentContext
from chancellor_core.model.schema import (
    ApprovalTrend,
    Demand,
    ExecutiveRelationship,
    MessageType,
    SimulationState,
)
from chancellor_core.politics.communications import (
    SUPPORT_RESTORED,
    SUPPORT_WITHDRAWN,
    CommunicationsOffice,
    decide_message,
    should_send_checkin,
    turns_since_contact,
)
from chancellor_core.politics.executive import ExecutiveInputs, ExecutiveRelationshipManager


def _inputs(**overrides) -> ExecutiveInputs:
    values = dict(
        turn=1,
        backbench_mood=60.0,
        rebellion_ready=0,
        approval=40.0,
        approval_trend=ApprovalTrend.STABLE,
        unemployment_rate=4.0,
        debt_pct_gdp=90.0,
        gilt_yield_10y=4.0,
        nhs_quality=70.0,
        deficit_bn=50.0,
        total_breaches=0,
        unaddressed_breaches=0,
    )
    values.update(overrides)
    return ExecutiveInputs(**values)


class TestDecideMessage:

    def test_silence_early_in_a_quiet_term(self):
        assert decide_message(ExecutiveRelationship(), _inputs(turn=1)) is None

    def test_first_checkin_at_turn_three(self):
        decision = decide_message(ExecutiveRelationship(), _inputs(turn=3))
        assert decision.type == MessageType.REGULAR_CHECKIN

    def test_checkin_every_six_turns_after_contact(self):
        rel = ExecutiveRelationship(last_contact_turn=4)
        assert not should_send_checkin(rel, 9)
        assert should_send_checkin(rel, 10)

    def test_turns_since_contact_before_any_contact(self):
        assert turns_since_contact(ExecutiveRelationship(), 4) == 5
        assert turns_since_contact(ExecutiveRelationship(last_contact_turn=2), 4) == 2

    def test_final_warning_outranks_everything(self):
        rel = ExecutiveRelationship(trust=20.0, reshuffle_risk=85.0)
        decision = decide_message(rel, _inputs(approval=20.0, deficit_bn=120.0))
        assert decision.type == MessageType.RESHUFFLE_WARNING

    def test_final_warning_sent_once(self):
        rel = ExecutiveRelationship(reshuffle_risk=85.0, final_warning_given=True, last_contact_turn=0)
        decision = decide_message(rel, _inputs(turn=1))
        assert decision is None or decision.type != MessageType.RESHUFFLE_WARNING

    def test_first_low_trust_message_is_a_warning(self):
        rel = ExecutiveRelationship(trust=25.0)
        assert decide_message(rel, _inputs(turn=1)).type == MessageType.WARNING

    def test_later_low_trust_messages_are_threats(self):
        rel = ExecutiveRelationship(trust=25.0, warnings_issued=1, last_contact_turn=3)
        assert decide_message(rel, _inputs(turn=5)).type == MessageType.THREAT

    def test_low_trust_throttled_by_contact_gap(self):
        rel = ExecutiveRelationship(trust=25.0, warnings_issued=1, last_contact_turn=4)
        assert decide_message(rel, _inputs(turn=5)) is None

    def test_concern_on_low_approval(self):
        rel = ExecutiveRelationship(trust=50.0, last_contact_turn=2)
        assert decide_message(rel, _inputs(turn=5, approval=20.0)).type == MessageType.CONCERN

    def test_demand_when_borrowing_high(self):
        rel = ExecutiveRelationship(trust=50.0, last_contact_turn=4)
        assert decide_message(rel, _inputs(turn=5, deficit_bn=90.0)).type == MessageType.DEMAND

    def test_no_second_demand_while_one_active(self):
        demand = Demand(id="d", target_bn=50.0, issued_turn=4, check_turn=5, deadline_turn=7)
        rel = ExecutiveRelationship(trust=50.0, last_contact_turn=4, demands=[demand])
        assert decide_message(rel, _inputs(turn=5, deficit_bn=90.0)) is None

    def test_praise_for_a_strong_month(self):
        rel = ExecutiveRelationship(trust=80.0, last_contact_turn=1)
        assert decide_message(rel, _inputs(turn=5, approval=55.0)).type == MessageType.PRAISE

    def test_support_withdrawn_after_repeated_warnings(self):
        rel = ExecutiveRelationship(
            trust=50.0, reshuffle_risk=65.0, warnings_issued=2, last_contact_turn=4
        )
        decision = decide_message(rel, _inputs(turn=5))
        assert decision.type == MessageType.SUPPORT_CHANGE
        assert decision.reason == SUPPORT_WITHDRAWN

    def test_support_restored_on_recovery(self):
        rel = ExecutiveRelationship(
            trust=55.0, reshuffle_risk=20.0, support_withdrawn=True, last_contact_turn=4
        )
        decision = decide_message(rel, _inputs(turn=5))
        assert decision.type == MessageType.SUPPORT_CHANGE
        assert decision.reason == SUPPORT_RESTORED


class TestCommunicationsOffice:

    def setup_method(self):
        self.manager = ExecutiveRelationshipManager()
        self.office = CommunicationsOffice(ContentCatalogue(), self.manager)
        self.state = SimulationState()
        self.ctx = ContentContext(trust=25.0, month="2024-08")
        self.rng = random.Random(1)

    def test_warning_recorded_and_rendered(self):
        rel = ExecutiveRelationship(trust=25.0)
        rel, message = self.office.process_turn(
            rel, _inputs(turn=1), self.ctx, self.rng, [], self.state.allocate_id
        )
        assert message.type == MessageType.WARNING
        assert message.template_id in {"warning-first", "warning-backbench"}
        assert "{" not in message.body
        assert message.id == "pm-00001"
        assert rel.warnings_issued == 1
        assert rel.last_contact_turn == 1

    def test_warning_then_silence_then_threat(self):
        rel = ExecutiveRelationship(trust=25.0)
        types = []
        for turn in (1, 2, 3):
            rel, message = self.office.process_turn(
                rel, _inputs(turn=turn), self.ctx, self.rng, [], self.state.allocate_id
            )
            types.append(message.type if message else None)
        assert types == [MessageType.WARNING, None, MessageType.THREAT]
        assert rel.warnings_issued == 2

    def test_demand_message_opens_a_demand(self):
        rel = ExecutiveRelationship(trust=50.0, last_contact_turn=4)
        rel, message = self.office.process_turn(
            rel, _inputs(turn=5, deficit_bn=90.0), self.ctx, self.rng, [], self.state.allocate_id
        )
        assert message.type == MessageType.DEMAND
        assert len(rel.active_demands()) == 1
        assert rel.demands[0].deadline_turn == 8
        assert rel.demands_issued == 1

    def test_final_warning_flag_set(self):
        rel = ExecutiveRelationship(reshuffle_risk=85.0)
        rel, message = self.office.process_turn(
            rel, _inputs(turn=2), self.ctx, self.rng, [], self.state.allocate_id
        )
        assert message.type == MessageType.RESHUFFLE_WARNING
        assert rel.final_warning_given

    def test_support_withdrawn_then_restored(self):
        rel = ExecutiveRelationship(
            trust=50.0, reshuffle_risk=65.0, warnings_issued=2, last_contact_turn=4
        )
        rel, message = self.office.process_turn(
            rel, _inputs(turn=5), self.ctx, self.rng, [], self.state.allocate_id
        )
        assert message.template_id == "support-withdrawn"
        assert rel.support_withdrawn

        rel = rel.model_copy(update={"trust": 60.0, "reshuffle_risk": 10.0})
        ctx = self.ctx.model_copy(update={"support_withdrawn": True})
        rel, message = self.office.process_turn(
            rel, _inputs(turn=6), ctx, self.rng, [], self.state.allocate_id
        )
        assert message.template_id == "support-restored"
        assert not rel.support_withdrawn

    def test_no_message_leaves_relationship_untouched(self):
        rel = ExecutiveRelationship(last_contact_turn=0)
        updated, message = self.office.process_turn(
            rel, _inputs(turn=1), self.ctx, self.rng, [], self.state.allocate_id
        )
        assert message is None
        assert updated == rel
        assert self.state.next_event_id == 1
