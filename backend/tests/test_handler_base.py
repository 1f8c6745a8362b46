"""Tests for BaseTriggerHandler hook ordering and the capability gate."""

import logging

import pytest

from triggerkit.auth import Capability, TypeCapabilities
from triggerkit.core import AuthorizationError, Record
from triggerkit.handlers import BaseTriggerHandler, TriggerHandler

from recording_handler import RecordingTriggerHandler


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def records():
    return [
        Record(type="Opportunity", fields={"Name": "Big deal"}, id="OPP-00001"),
        Record(type="Opportunity", fields={"Name": "Small deal"}, id="OPP-00002"),
    ]


@pytest.fixture
def prior_state(records):
    return {record.id: record.snapshot() for record in records}


def make_handler(records, capabilities=None, prior_state=None):
    return RecordingTriggerHandler(
        records,
        capabilities=capabilities or TypeCapabilities.full("Opportunity"),
        prior_state=prior_state,
    )


# =============================================================================
# Construction and batch ownership
# =============================================================================


class TestConstruction:
    def test_satisfies_trigger_handler_protocol(self, records):
        handler = BaseTriggerHandler(
            records, capabilities=TypeCapabilities.full("Opportunity")
        )
        assert isinstance(handler, TriggerHandler)

    def test_record_type_comes_from_capabilities(self, records):
        handler = make_handler(records)
        assert handler.record_type == "Opportunity"

    def test_batch_is_a_private_copy_of_the_sequence(self, records):
        handler = make_handler(records)
        records.append(Record(type="Opportunity", fields={"Name": "Late"}))
        records.pop(0)
        assert [r["Name"] for r in handler.records] == ["Big deal", "Small deal"]

    def test_records_are_shared_by_reference(self, records):
        handler = make_handler(records)
        handler.records[0]["Name"] = "Renamed"
        assert records[0]["Name"] == "Renamed"

    def test_default_hooks_are_no_ops(self, records, prior_state):
        handler = BaseTriggerHandler(
            records,
            capabilities=TypeCapabilities.full("Opportunity"),
            prior_state=prior_state,
        )
        handler.handle_before_insert()
        handler.handle_before_update(prior_state)
        handler.handle_before_delete()
        handler.handle_after_insert()
        handler.handle_after_update(prior_state)
        handler.handle_after_delete()
        handler.handle_after_undelete()
        assert [r.errors for r in records] == [[], []]


# =============================================================================
# Prior state
# =============================================================================


class TestPriorState:
    def test_explicit_mapping_is_used(self, records, prior_state):
        handler = make_handler(records, prior_state=prior_state)
        assert handler.prior_state is prior_state

    def test_absent_source_yields_empty_mapping(self, records):
        handler = make_handler(records)
        assert handler.prior_state == {}

    def test_source_is_not_called_until_accessed(self, records, prior_state):
        calls = []

        def source():
            calls.append(1)
            return prior_state

        handler = BaseTriggerHandler(
            records,
            capabilities=TypeCapabilities.full("Opportunity"),
            prior_state=source,
        )
        assert calls == []
        assert handler.prior_state is prior_state
        assert calls == [1]

    def test_source_is_called_at_most_once(self, records, prior_state):
        calls = []

        def source():
            calls.append(1)
            return prior_state

        handler = make_handler(records, prior_state=source)
        handler.prior_state
        handler.prior_state
        assert calls == [1]

    def test_source_returning_none_yields_empty_mapping(self, records):
        handler = make_handler(records, prior_state=lambda: None)
        assert handler.prior_state == {}


# =============================================================================
# Hook ordering
# =============================================================================


class TestHookOrdering:
    def test_before_insert_applies_defaults_first(self, records):
        handler = make_handler(records)
        handler.handle_before_insert()
        assert handler.call_names == ["on_apply_defaults", "on_before_insert"]

    def test_before_update_passes_prior_state(self, records, prior_state):
        handler = make_handler(records)
        handler.handle_before_update(prior_state)
        assert handler.calls == [("on_before_update", prior_state)]

    def test_before_delete(self, records):
        handler = make_handler(records)
        handler.handle_before_delete()
        assert handler.call_names == ["on_before_delete"]

    def test_after_insert_validates_without_prior_state(self, records):
        handler = make_handler(records)
        handler.handle_after_insert()
        assert handler.calls == [("on_validate", None), ("on_after_insert",)]

    def test_after_update_validates_with_prior_state_first(self, records, prior_state):
        handler = make_handler(records)
        handler.handle_after_update(prior_state)
        assert handler.calls == [
            ("on_validate", prior_state),
            ("on_after_update", prior_state),
        ]

    def test_after_delete(self, records):
        handler = make_handler(records)
        handler.handle_after_delete()
        assert handler.call_names == ["on_after_delete"]

    def test_after_undelete(self, records):
        handler = make_handler(records)
        handler.handle_after_undelete()
        assert handler.call_names == ["on_after_undelete"]

    def test_before_phases_are_not_gated(self, records, prior_state):
        handler = make_handler(records, TypeCapabilities.none("Opportunity"))
        handler.handle_before_insert()
        handler.handle_before_update(prior_state)
        handler.handle_before_delete()
        assert handler.call_names == [
            "on_apply_defaults",
            "on_before_insert",
            "on_before_update",
            "on_before_delete",
        ]


# =============================================================================
# Capability gate
# =============================================================================


class TestCapabilityGate:
    @pytest.mark.parametrize(
        "phase, capability",
        [
            ("handle_after_insert", Capability.CREATE),
            ("handle_after_update", Capability.UPDATE),
            ("handle_after_delete", Capability.DELETE),
            ("handle_after_undelete", Capability.RESTORE),
        ],
    )
    def test_denied_capability_raises_before_any_hook(
        self, records, prior_state, phase, capability
    ):
        handler = make_handler(records, TypeCapabilities.none("Opportunity"))
        args = (prior_state,) if phase == "handle_after_update" else ()

        with pytest.raises(AuthorizationError) as exc_info:
            getattr(handler, phase)(*args)

        assert exc_info.value.action is capability
        assert exc_info.value.record_type == "Opportunity"
        assert handler.calls == []

    def test_error_message_names_action_and_type(self, records):
        handler = make_handler(records, TypeCapabilities.none("Opportunity"))
        with pytest.raises(AuthorizationError, match="create Opportunity records"):
            handler.handle_after_insert()

    def test_only_the_required_capability_is_checked(self, records, prior_state):
        capabilities = TypeCapabilities("Opportunity", can_update=True)
        handler = make_handler(records, capabilities)

        handler.handle_after_update(prior_state)
        with pytest.raises(AuthorizationError):
            handler.handle_after_insert()

        assert handler.call_names == ["on_validate", "on_after_update"]

    def test_denial_is_logged(self, records, caplog):
        handler = make_handler(records, TypeCapabilities.none("Opportunity"))
        with caplog.at_level(logging.WARNING, logger="triggerkit.handlers.base"):
            with pytest.raises(AuthorizationError):
                handler.handle_after_delete()
        assert "denied delete on Opportunity" in caplog.text

    def test_validation_annotations_do_not_raise(self, records):
        class RejectAll(BaseTriggerHandler):
            def on_validate(self, prior_state=None):
                for record in self.records:
                    record.add_error("Rejected")

        handler = RejectAll(records, capabilities=TypeCapabilities.full("Opportunity"))
        handler.handle_after_insert()
        assert all(r.has_errors for r in records)
