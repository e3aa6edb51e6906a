"""
Approval workflow: single-timesheet transitions and bulk review.
"""
from .bulk import BulkActionCoordinator
from .state_machine import (
    TIMESHEET_TRANSITIONS,
    TRANSITION_EDGES,
    ApprovalWorkflow,
    Transition,
    can_transition,
)

__all__ = [
    'ApprovalWorkflow',
    'BulkActionCoordinator',
    'TIMESHEET_TRANSITIONS',
    'TRANSITION_EDGES',
    'Transition',
    'can_transition',
]
