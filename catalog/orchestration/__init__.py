"""Orchestration layer - the project approval workflow."""

from catalog.orchestration.state_machine import (
    ApprovalStateMachine,
    can_review,
    initial_status,
    valid_transitions,
)
from catalog.kernel.models.project import ApprovalStatus

__all__ = [
    "ApprovalStateMachine",
    "ApprovalStatus",
    "can_review",
    "initial_status",
    "valid_transitions",
]
