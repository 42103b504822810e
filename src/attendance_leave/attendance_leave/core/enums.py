from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    EMPLOYEE = "Employee"
    MANAGER = "Manager"
    ADMINISTRATOR = "Administrator"


class ApprovalStatus(str, Enum):
    """Approval state shared by attendance records and leave requests.

    ``CANCELLED`` only applies to leave requests.
    """

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class LeaveType(str, Enum):
    """Leave categories, each backed by its own ledger balance."""

    CASUAL_LEAVE = "CasualLeave"
    EARNED_LEAVE = "EarnedLeave"
    COMPENSATORY_OFF = "CompensatoryOff"
