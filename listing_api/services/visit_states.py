"""
Visit status state machine.

    pending  → approved | rejected | cancelled
    approved → completed | cancelled

rejected, completed and cancelled are terminal.
"""

from enum import Enum


class VisitStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TRANSITIONS: dict[VisitStatus, frozenset[VisitStatus]] = {
    VisitStatus.PENDING: frozenset({VisitStatus.APPROVED, VisitStatus.REJECTED, VisitStatus.CANCELLED}),
    VisitStatus.APPROVED: frozenset({VisitStatus.COMPLETED, VisitStatus.CANCELLED}),
    VisitStatus.REJECTED: frozenset(),
    VisitStatus.COMPLETED: frozenset(),
    VisitStatus.CANCELLED: frozenset(),
}

# Count against slot availability and the slot uniqueness index
ACTIVE_STATUSES = frozenset({VisitStatus.PENDING, VisitStatus.APPROVED})
ACTIVE_STATUS_VALUES = tuple(sorted(s.value for s in ACTIVE_STATUSES))


def can_transition(current: str, target: str) -> bool:
    return VisitStatus(target) in TRANSITIONS[VisitStatus(current)]


def sources_for(target: str, allowed_from: frozenset[VisitStatus] | None = None) -> list[str]:
    """
    Statuses from which `target` is reachable, optionally narrowed to `allowed_from`.

    Used as the WHERE clause of the conditional status UPDATE.
    """
    target = VisitStatus(target)
    sources = {s for s, targets in TRANSITIONS.items() if target in targets}
    if allowed_from is not None:
        sources &= allowed_from
    return sorted(s.value for s in sources)
