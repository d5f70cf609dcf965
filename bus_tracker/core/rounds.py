"""Bus round status workflow: pending -> in_progress -> completed."""
from typing import Optional

PENDING = "pending"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"

# transition name -> (required current status, resulting status, notification type)
TRANSITIONS = {
    "start": (PENDING, IN_PROGRESS, "round_started"),
    "stop": (IN_PROGRESS, COMPLETED, "round_completed"),
}


class IllegalTransition(Exception):
    def __init__(self, transition: str, current: str):
        self.transition = transition
        self.current = current
        super().__init__(f"Cannot {transition} a round that is {current}")


def next_status(transition: str, current: str, strict: bool = False) -> str:
    """Status a round moves to; with `strict`, only from the expected predecessor."""
    required, target, _ = TRANSITIONS[transition]
    if strict and current != required:
        raise IllegalTransition(transition, current)
    return target


def notification_for(transition: str, round_name: str) -> tuple:
    """(notification type, message) announcing a transition."""
    _, _, kind = TRANSITIONS[transition]
    if transition == "start":
        return kind, f"{round_name} has started"
    return kind, f"{round_name} has been completed"
