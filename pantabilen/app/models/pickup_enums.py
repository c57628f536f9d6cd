"""
Pickup-related enumerations.
"""

import enum


class PickupStatus(str, enum.Enum):
    """Pickup order status enumeration."""
    PENDING = "pending"  # Request received, not yet scheduled
    SCHEDULED = "scheduled"  # Pickup order created, awaiting driver
    ASSIGNED = "assigned"  # Driver assigned
    IN_PROGRESS = "in_progress"  # Driver on the way / collecting
    COMPLETED = "completed"  # Vehicle collected
    CANCELLED = "cancelled"  # Cancelled by admin or customer
    REJECTED = "rejected"  # Rejected by driver


class PickupTransition(str, enum.Enum):
    """Named transitions a pickup order can go through."""
    SCHEDULE = "schedule"
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    REJECT = "reject"
    RESCHEDULE = "reschedule"
