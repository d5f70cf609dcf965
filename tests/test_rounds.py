import pytest

from bus_tracker.core import rounds


def test_start_and_stop_move_through_the_workflow():
    assert rounds.next_status("start", rounds.PENDING) == rounds.IN_PROGRESS
    assert rounds.next_status("stop", rounds.IN_PROGRESS) == rounds.COMPLETED


def test_lenient_mode_accepts_any_current_status():
    assert rounds.next_status("start", rounds.COMPLETED) == rounds.IN_PROGRESS
    assert rounds.next_status("stop", rounds.PENDING) == rounds.COMPLETED


@pytest.mark.parametrize("transition,current", [
    ("start", rounds.IN_PROGRESS),
    ("start", rounds.COMPLETED),
    ("stop", rounds.PENDING),
    ("stop", rounds.COMPLETED),
])
def test_strict_mode_rejects_out_of_order_transitions(transition, current):
    with pytest.raises(rounds.IllegalTransition) as excinfo:
        rounds.next_status(transition, current, strict=True)
    assert current in str(excinfo.value)


def test_notification_text_names_the_round():
    assert rounds.notification_for("start", "Morning Route A") == ("round_started", "Morning Route A has started")
    assert rounds.notification_for("stop", "Morning Route A") == (
        "round_completed", "Morning Route A has been completed"
    )
