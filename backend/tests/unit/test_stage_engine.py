from datetime import datetime, timezone

import pytest

from bgf_dashboard.domain.enums import HistoryAction, RequestStatus, RequestType, UserRole
from bgf_dashboard.domain.errors import (
    InvalidTransitionError, StoreUnavailableError, ValidationError, WorkflowNotFoundError
)
from bgf_dashboard.domain.models import Request, RequesterSnapshot, StaffIdentity
from bgf_dashboard.engine.stage_engine import StageEngine
from bgf_dashboard.repositories.request_repo import RequestRepository
from bgf_dashboard.repositories.workflow_repo import WorkflowRepository
from bgf_dashboard.utils.time import FrozenClock

START = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FrozenClock(START)


@pytest.fixture
def engine(clock):
    return StageEngine(WorkflowRepository(), RequestRepository(), clock=clock)


@pytest.fixture
def reviewer():
    return StaffIdentity(id="staff_HOP001", name="Jane", role=UserRole.HEAD_OF_PROGRAMS, staff_number="HOP001")


def _submit(engine, reviewer, request_type=RequestType.EDUCATION, request_id="REQ-1"):
    request = Request(
        request_id=request_id,
        ticket_number="REQ-000001",
        title="Books",
        type=request_type,
        requester=RequesterSnapshot(id="USR-1", name="Ben", email="ben@example.com"),
        created_at=START,
        updated_at=START,
    )
    engine.request_repo.create_request(request)
    engine.initialize_workflow(request, reviewer)
    return request


def test_initialize_places_request_at_initial_stage(engine, reviewer):
    _submit(engine, reviewer)
    record = engine.get_workflow("REQ-1")
    assert record.current_stage == "submitted"
    assert record.request_type == "education"

    history = engine.get_history("REQ-1")
    assert len(history) == 1
    assert history[0].action == HistoryAction.STATUS_CHANGE
    assert history[0].previous_status is None
    assert history[0].new_status == "submitted"


def test_valid_transition_updates_stage_status_and_history(engine, reviewer):
    _submit(engine, reviewer)
    engine.update_stage("REQ-1", "initial_review", reviewer, comment="Looks complete")

    assert engine.get_workflow("REQ-1").current_stage == "initial_review"
    assert engine.request_repo.get_request("REQ-1").status == RequestStatus.UNDER_REVIEW

    history = engine.get_history("REQ-1")
    assert len(history) == 2
    last = history[-1]
    assert (last.previous_status, last.new_status) == ("submitted", "initial_review")
    assert last.details == "Looks complete"
    assert last.actor.name == "Jane"
    assert last.actor.is_staff is True


def test_invalid_transition_is_rejected_without_side_effects(engine, reviewer):
    _submit(engine, reviewer)
    with pytest.raises(InvalidTransitionError) as exc:
        engine.update_stage("REQ-1", "approved", reviewer)

    assert exc.value.http_status == 409
    assert exc.value.details["current_stage"] == "submitted"
    assert exc.value.details["allowed_stages"] == ["initial_review", "rejected", "cancelled"]
    assert engine.get_workflow("REQ-1").current_stage == "submitted"
    assert engine.request_repo.get_request("REQ-1").status == RequestStatus.SUBMITTED
    assert len(engine.get_history("REQ-1")) == 1


def test_terminal_stage_has_no_way_out(engine, reviewer):
    _submit(engine, reviewer)
    engine.update_stage("REQ-1", "rejected", reviewer)
    assert engine.request_repo.get_request("REQ-1").status == RequestStatus.REJECTED
    assert engine.is_terminal(engine.get_workflow("REQ-1"))

    with pytest.raises(InvalidTransitionError):
        engine.update_stage("REQ-1", "initial_review", reviewer)


def test_full_scholarship_path(engine, reviewer):
    _submit(engine, reviewer, RequestType.SCHOLARSHIP)
    expected = [
        ("initial_review", RequestStatus.UNDER_REVIEW),
        ("documentation_review", RequestStatus.UNDER_REVIEW),
        ("financial_review", RequestStatus.OFFICER_REVIEWED),
        ("final_review", RequestStatus.HOP_REVIEWED),
        ("approved", RequestStatus.APPROVED),
    ]
    for stage, status in expected:
        engine.update_stage("REQ-1", stage, reviewer)
        assert engine.request_repo.get_request("REQ-1").status == status

    assert len(engine.get_history("REQ-1")) == len(expected) + 1


def test_history_sequence_and_timestamps_increase_with_stalled_clock(engine, reviewer, clock):
    _submit(engine, reviewer)
    engine.update_stage("REQ-1", "initial_review", reviewer)
    engine.add_comment("REQ-1", reviewer, "first")
    engine.add_comment("REQ-1", reviewer, "second")

    history = engine.get_history("REQ-1")
    assert [h.sequence for h in history] == [1, 2, 3, 4]
    stamps = [h.created_at for h in history]
    assert all(later > earlier for earlier, later in zip(stamps, stamps[1:]))
    assert stamps[0] == START


def test_history_timestamps_increase_when_clock_steps_back(engine, reviewer, clock):
    _submit(engine, reviewer)
    clock.advance(minutes=-5)
    engine.update_stage("REQ-1", "initial_review", reviewer)

    first, second = engine.get_history("REQ-1")
    assert second.created_at > first.created_at


def test_delegate_records_assignment(engine, reviewer):
    _submit(engine, reviewer)
    record = engine.delegate_request("REQ-1", "staff_APO001", reviewer, reason="Field visit", staff_name="Sam")

    assert record.assigned_to == "staff_APO001"
    assert record.assigned_to_name == "Sam"
    entry = engine.get_history("REQ-1")[-1]
    assert entry.action == HistoryAction.ASSIGNMENT
    assert entry.details == "Field visit"


def test_empty_comment_rejected(engine, reviewer):
    _submit(engine, reviewer)
    with pytest.raises(ValidationError):
        engine.add_comment("REQ-1", reviewer, "   ")


def test_unknown_request(engine, reviewer):
    with pytest.raises(WorkflowNotFoundError):
        engine.update_stage("REQ-404", "initial_review", reviewer)


def test_failed_history_write_restores_previous_stage(engine, reviewer, monkeypatch):
    _submit(engine, reviewer)

    def unavailable(entry):
        raise StoreUnavailableError("Database is unavailable")

    monkeypatch.setattr(engine.workflow_repo, "append_history", unavailable)
    with pytest.raises(StoreUnavailableError):
        engine.update_stage("REQ-1", "initial_review", reviewer)
    monkeypatch.undo()

    assert engine.get_workflow("REQ-1").current_stage == "submitted"
    assert engine.request_repo.get_request("REQ-1").status == RequestStatus.SUBMITTED
    assert len(engine.get_history("REQ-1")) == 1

    engine.update_stage("REQ-1", "initial_review", reviewer)
    assert len(engine.get_history("REQ-1")) == 2
