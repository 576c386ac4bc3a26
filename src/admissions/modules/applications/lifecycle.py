"""
Application Lifecycle

The review state machine. State is never stored; it is derived from
(is_approved, is_qualified, reviewed_at) by derive_state(), in this
precedence:

    QUALIFIED     approved and qualified
    DISQUALIFIED  approved, is_qualified is False, reviewed
    APPROVED      approved otherwise (qualification undecided)
    DISAPPROVED   not approved, reviewed
    PENDING       not approved, never reviewed

The apply_* functions mutate an application in memory and never touch the
database; the service commits each transition as one unit. Every
transition stamps updated_at.
"""

import enum
from datetime import date, datetime
from typing import Any
from uuid import UUID

from admissions.core.errors import ForbiddenError

CONTENT_FIELDS = ("personal_info", "address_info", "contact_info", "educational_info")


class ApplicationState(str, enum.Enum):
    """Derived review state."""

    PENDING = "pending"
    APPROVED = "approved"
    DISAPPROVED = "disapproved"
    QUALIFIED = "qualified"
    DISQUALIFIED = "disqualified"


class ApplicationFrozenError(ForbiddenError):
    """Raised when an owner edits an application that has been approved."""

    def __init__(self):
        super().__init__("Approved applications can no longer be edited.")
        self.error_code = "APPLICATION_FROZEN"


class NotApprovedError(ForbiddenError):
    """Raised when an operation needs an approved application."""

    def __init__(self, action: str):
        super().__init__(f"Cannot {action}: the application has not been approved.")
        self.error_code = "APPLICATION_NOT_APPROVED"


def derive_state(
    is_approved: bool,
    is_qualified: bool | None,
    reviewed_at: datetime | None,
) -> ApplicationState:
    """Derive the review state from the stored status fields."""
    if is_approved:
        if is_qualified is True:
            return ApplicationState.QUALIFIED
        if is_qualified is False and reviewed_at is not None:
            return ApplicationState.DISQUALIFIED
        return ApplicationState.APPROVED

    if reviewed_at is not None:
        return ApplicationState.DISAPPROVED
    return ApplicationState.PENDING


def state_of(application) -> ApplicationState:
    return derive_state(application.is_approved, application.is_qualified, application.reviewed_at)


def _stamp_review(application, reviewer: str, now: datetime) -> None:
    application.reviewed_at = now
    application.reviewed_by = reviewer


def apply_approval(application, approved: bool, reviewer: str, now: datetime) -> bool:
    """
    Set the approval flag.

    Repeating the current decision on an already reviewed application only
    refreshes updated_at. Un-approving is allowed.

    Returns:
        True if is_approved changed
    """
    changed = application.is_approved != approved
    application.updated_at = now

    if not changed and application.reviewed_at is not None:
        return False

    application.is_approved = approved
    _stamp_review(application, reviewer, now)
    return changed


def apply_qualification(
    application,
    qualified: bool,
    reviewer: str,
    now: datetime,
    require_approval: bool = True,
) -> bool:
    """
    Set the qualification decision.

    Raises:
        NotApprovedError: If require_approval is set and the application
            is not approved

    Returns:
        True if is_qualified changed
    """
    if require_approval and not application.is_approved:
        raise NotApprovedError("set qualification")

    changed = application.is_qualified != qualified
    application.updated_at = now

    if not changed and application.reviewed_at is not None:
        return False

    application.is_qualified = qualified
    _stamp_review(application, reviewer, now)
    return changed


def apply_department(application, department_id: UUID | None, now: datetime) -> None:
    """Assign or clear the department. Allowed in any state."""
    application.department_id = department_id
    application.updated_at = now


def apply_hall_ticket(application, now: datetime) -> None:
    """
    Issue the hall ticket.

    Raises:
        NotApprovedError: If the application is not approved
    """
    if not application.is_approved:
        raise NotApprovedError("issue a hall ticket")

    application.hall_ticket_issued = True
    application.hall_ticket_issued_at = now
    application.updated_at = now


def apply_exam_schedule(
    application,
    now: datetime,
    *,
    center_name: str | None = None,
    exam_date: date | None = None,
    exam_time: str | None = None,
    issue_hall_ticket: bool = True,
) -> None:
    """
    Merge exam details into the application.

    Only the fields passed are changed. When issue_hall_ticket is set and a
    date or time is given, the hall ticket is issued as well.

    Raises:
        NotApprovedError: If the application is not approved
    """
    if not application.is_approved:
        raise NotApprovedError("schedule an exam")

    if center_name is not None:
        application.exam_center_name = center_name
    if exam_date is not None:
        application.exam_date = exam_date
    if exam_time is not None:
        application.exam_time = exam_time
    application.updated_at = now

    if issue_hall_ticket and (exam_date is not None or exam_time is not None):
        apply_hall_ticket(application, now)


def apply_content_update(
    application,
    changes: dict[str, dict[str, Any]],
    now: datetime,
    *,
    as_owner: bool,
) -> None:
    """
    Merge partial content blocks into the application.

    Args:
        changes: Mapping of content field name to the keys being changed
        as_owner: Owners may only edit while the application is not approved

    Raises:
        ApplicationFrozenError: If an owner edits an approved application
    """
    if as_owner and application.is_approved:
        raise ApplicationFrozenError()

    for field, patch in changes.items():
        if field not in CONTENT_FIELDS:
            raise ValueError(f"{field} is not a content field")
        # Reassign so the JSONB change is detected
        setattr(application, field, {**(getattr(application, field) or {}), **patch})
    application.updated_at = now
