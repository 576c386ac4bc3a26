"""
Access Policies

Who may do what to an application. Anonymous callers never reach these
checks (every endpoint requires a session), but they are modelled so the
table reads completely.
"""

import enum

from admissions.core.auth import CurrentUser
from admissions.core.errors import ForbiddenError, UnauthorizedError


class Action(str, enum.Enum):
    VIEW = "view"
    CREATE = "create"
    AMEND_CONTENT = "amend_content"
    REVIEW = "review"
    APPLICATION_PDF = "application_pdf"
    HALL_TICKET_PDF = "hall_ticket_pdf"
    LIST_ALL = "list_all"
    LIST_OWN = "list_own"


def _is_owner(user: CurrentUser, application) -> bool:
    return application is not None and application.user_id == user.uid


def can(user: CurrentUser | None, action: Action, application=None) -> bool:
    """Return True if ``user`` may perform ``action`` on ``application``."""
    if user is None:
        return False
    if user.is_admin:
        return True

    if action in (Action.CREATE, Action.LIST_OWN):
        return True
    if action in (Action.VIEW, Action.APPLICATION_PDF):
        return _is_owner(user, application)
    if action == Action.AMEND_CONTENT:
        return _is_owner(user, application) and not application.is_approved
    if action == Action.HALL_TICKET_PDF:
        return _is_owner(user, application) and application.is_approved
    return False


def authorize(user: CurrentUser | None, action: Action, application=None) -> None:
    """
    Raise unless ``user`` may perform ``action``.

    Raises:
        UnauthorizedError: If there is no caller
        ForbiddenError: If the caller lacks permission
    """
    if user is None:
        raise UnauthorizedError()
    if not can(user, action, application):
        raise ForbiddenError()
