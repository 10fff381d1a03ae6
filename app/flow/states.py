"""
app/flow/states.py

Purpose: Defines all admin code request states

- Enum of request statuses (PENDING, APPROVED, REJECTED)
- Single source of truth for the request lifecycle
- State transition validation
- Metadata for each state
"""

from enum import Enum
from typing import Dict, List
from dataclasses import dataclass


class RequestStatus(str, Enum):
    """
    Lifecycle of an admin code request.
    A request is created PENDING and is decided exactly once.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class StateMetadata:
    """
    Metadata associated with each request status.
    """
    name: RequestStatus
    display_name: str
    is_terminal: bool = False
    description: str = ""


STATE_METADATA: Dict[RequestStatus, StateMetadata] = {
    RequestStatus.PENDING: StateMetadata(
        name=RequestStatus.PENDING,
        display_name="Pending Review",
        description="Submitted, waiting for an admin decision"
    ),
    RequestStatus.APPROVED: StateMetadata(
        name=RequestStatus.APPROVED,
        display_name="Approved",
        is_terminal=True,
        description="Admin code issued and sent to the requester"
    ),
    RequestStatus.REJECTED: StateMetadata(
        name=RequestStatus.REJECTED,
        display_name="Rejected",
        is_terminal=True,
        description="Request declined with a reason"
    ),
}


# Valid state transitions - approved and rejected are terminal
STATE_TRANSITIONS: Dict[RequestStatus, List[RequestStatus]] = {
    RequestStatus.PENDING: [
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
    ],
    RequestStatus.APPROVED: [],
    RequestStatus.REJECTED: [],
}


def is_valid_transition(from_state: RequestStatus, to_state: RequestStatus) -> bool:
    """
    Checks if a state transition is valid.

    Args:
        from_state: Current status
        to_state: Target status

    Returns:
        True if transition is allowed, False otherwise
    """
    allowed_transitions = STATE_TRANSITIONS.get(from_state, [])
    return to_state in allowed_transitions


def get_state_metadata(state: RequestStatus) -> StateMetadata:
    """
    Retrieves metadata for a given status.
    """
    return STATE_METADATA[state]


def is_terminal(state: RequestStatus) -> bool:
    return get_state_metadata(state).is_terminal
