"""
Tests for application access rules.
"""

import pytest

from admissions.core.errors import ForbiddenError, UnauthorizedError
from admissions.modules.applications.policies import Action, authorize, can


@pytest.mark.parametrize("action", list(Action))
def test_anonymous_is_always_denied(action, pending_application):
    assert can(None, action, pending_application) is False

    with pytest.raises(UnauthorizedError):
        authorize(None, action, pending_application)


@pytest.mark.parametrize("action", list(Action))
def test_admin_is_always_allowed(action, admin, approved_application):
    assert can(admin, action, approved_application) is True


def test_owner_can_view_and_download_own_form(applicant, pending_application):
    assert can(applicant, Action.VIEW, pending_application)
    assert can(applicant, Action.APPLICATION_PDF, pending_application)
    assert can(applicant, Action.LIST_OWN)
    assert can(applicant, Action.CREATE)


def test_other_user_cannot_view(other_applicant, pending_application):
    assert not can(other_applicant, Action.VIEW, pending_application)

    with pytest.raises(ForbiddenError):
        authorize(other_applicant, Action.APPLICATION_PDF, pending_application)


def test_owner_amends_only_until_approved(applicant, pending_application, approved_application):
    assert can(applicant, Action.AMEND_CONTENT, pending_application)
    assert not can(applicant, Action.AMEND_CONTENT, approved_application)


def test_hall_ticket_needs_approval_for_owner(
    applicant, pending_application, approved_application
):
    assert not can(applicant, Action.HALL_TICKET_PDF, pending_application)
    assert can(applicant, Action.HALL_TICKET_PDF, approved_application)


def test_users_cannot_review_or_list_all(applicant, pending_application):
    assert not can(applicant, Action.REVIEW, pending_application)
    assert not can(applicant, Action.LIST_ALL)
