"""
Tests for the applications service layer.

These tests verify:
- Submission with payment verification and numbering
- Access checks on lookups and updates
- Review transitions and their notification side effects
- Listing and pagination
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from admissions.core.errors import ForbiddenError
from admissions.modules.applications.lifecycle import ApplicationFrozenError, NotApprovedError
from admissions.modules.applications.schemas import (
    AddressInfo,
    ApplicationCreate,
    ApplicationUpdate,
    ContactInfo,
    ExamScheduleRequest,
    PaymentConfirmation,
    PersonalInfo,
)
from admissions.modules.applications.service import (
    ApplicationNotFoundError,
    DuplicatePaymentError,
    MissingRequiredFieldsError,
    ReadOnlyFieldError,
    assign_department,
    get_application,
    list_applications,
    schedule_exam,
    set_approval,
    set_qualification,
    submit_application,
    update_application,
)
from admissions.modules.departments.service import DepartmentNotFoundError
from admissions.modules.payments.service import InvalidPaymentError

SERVICE = "admissions.modules.applications.service"


@pytest.fixture
def application_create():
    return ApplicationCreate(
        personal_info=PersonalInfo(name="Muhammed Ali", father_name="Abdul Rahman"),
        address_info=AddressInfo(place="Kondotty", district="Malappuram"),
        contact_info=ContactInfo(mobile_number="+919876543210"),
        payment=PaymentConfirmation(
            order_id="order_1", payment_id="pay_1", signature="sig", amount=Decimal("500")
        ),
    )


@pytest.fixture
def mock_repo():
    with patch(f"{SERVICE}.repository") as repo:
        repo.save = AsyncMock(side_effect=lambda db, application: application)
        yield repo


@pytest.fixture
def mock_payments():
    with patch(f"{SERVICE}.payment_service") as payments:
        yield payments


# ============================================
# submit_application
# ============================================


@pytest.mark.asyncio
async def test_submit_application_success(
    mock_db, mock_repo, mock_payments, applicant, application_create, application_factory
):
    created = application_factory(application_no="EXM20250001")
    mock_repo.get_by_transaction_id = AsyncMock(return_value=None)
    mock_repo.create = AsyncMock(return_value=created)

    with patch(
        f"{SERVICE}.generate_application_number",
        new_callable=AsyncMock,
        return_value="EXM20250001",
    ):
        result = await submit_application(mock_db, applicant, application_create)

    assert result is created
    mock_payments.check_fee_amount.assert_called_once_with(Decimal("500"))
    mock_payments.verify_payment.assert_called_once_with("order_1", "pay_1", "sig")

    kwargs = mock_repo.create.call_args.kwargs
    assert kwargs["application_no"] == "EXM20250001"
    assert kwargs["user_id"] == "applicant-uid"
    assert kwargs["payment_transaction_id"] == "pay_1"
    assert kwargs["personal_info"] == {"name": "Muhammed Ali", "fatherName": "Abdul Rahman"}
    assert kwargs["contact_info"] == {"mobileNumber": "+919876543210"}


@pytest.mark.asyncio
async def test_submit_application_missing_fields(
    mock_db, mock_repo, mock_payments, applicant, application_create
):
    application_create.personal_info.name = "  "
    application_create.contact_info.mobile_number = None

    with pytest.raises(MissingRequiredFieldsError) as exc_info:
        await submit_application(mock_db, applicant, application_create)

    assert exc_info.value.error_code == "MISSING_REQUIRED_FIELDS"
    assert "personalInfo.name" in exc_info.value.message
    assert "contactInfo.mobileNumber" in exc_info.value.message
    mock_payments.verify_payment.assert_not_called()


@pytest.mark.asyncio
async def test_submit_application_invalid_signature(
    mock_db, mock_repo, mock_payments, applicant, application_create
):
    mock_payments.verify_payment.side_effect = InvalidPaymentError(
        "Invalid payment signature.", "INVALID_PAYMENT_SIGNATURE"
    )
    mock_repo.create = AsyncMock()

    with pytest.raises(InvalidPaymentError):
        await submit_application(mock_db, applicant, application_create)

    mock_repo.create.assert_not_called()


@pytest.mark.asyncio
async def test_submit_application_duplicate_payment(
    mock_db, mock_repo, mock_payments, applicant, application_create, pending_application
):
    mock_repo.get_by_transaction_id = AsyncMock(return_value=pending_application)
    mock_repo.create = AsyncMock()

    with pytest.raises(DuplicatePaymentError) as exc_info:
        await submit_application(mock_db, applicant, application_create)

    assert exc_info.value.status_code == 409
    mock_repo.create.assert_not_called()


# ============================================
# get_application / update_application
# ============================================


@pytest.mark.asyncio
async def test_get_application_not_found(mock_db, mock_repo, applicant):
    mock_repo.get_by_id = AsyncMock(return_value=None)

    with pytest.raises(ApplicationNotFoundError):
        await get_application(mock_db, applicant, uuid4())


@pytest.mark.asyncio
async def test_get_application_of_other_user_forbidden(
    mock_db, mock_repo, other_applicant, pending_application
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with pytest.raises(ForbiddenError):
        await get_application(mock_db, other_applicant, pending_application.id)


@pytest.mark.asyncio
async def test_owner_updates_pending_application(
    mock_db, mock_repo, applicant, pending_application
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    result = await update_application(
        mock_db,
        applicant,
        pending_application.id,
        ApplicationUpdate(address_info=AddressInfo(place="Tirur")),
    )

    assert result.address_info["place"] == "Tirur"
    assert result.address_info["district"] == "Malappuram"
    mock_repo.save.assert_awaited_once()


@pytest.mark.asyncio
async def test_owner_cannot_update_approved_application(
    mock_db, mock_repo, applicant, approved_application
):
    mock_repo.get_by_id = AsyncMock(return_value=approved_application)

    with pytest.raises(ApplicationFrozenError):
        await update_application(
            mock_db,
            applicant,
            approved_application.id,
            ApplicationUpdate(personal_info=PersonalInfo(name="New Name")),
        )

    assert approved_application.personal_info["name"] == "Muhammed Ali"
    mock_repo.save.assert_not_called()


@pytest.mark.asyncio
async def test_update_rejects_status_fields(mock_db, mock_repo, applicant, pending_application):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate({"status": {"isApproved": True}})

    with pytest.raises(ReadOnlyFieldError) as exc_info:
        await update_application(mock_db, applicant, pending_application.id, data)

    assert exc_info.value.status_code == 403
    assert pending_application.is_approved is False


@pytest.mark.asyncio
async def test_admin_updates_approved_application(
    mock_db, mock_repo, admin, approved_application
):
    mock_repo.get_by_id = AsyncMock(return_value=approved_application)

    result = await update_application(
        mock_db,
        admin,
        approved_application.id,
        ApplicationUpdate(personal_info=PersonalInfo(name="Corrected")),
    )

    assert result.personal_info["name"] == "Corrected"


@pytest.mark.asyncio
async def test_owner_cannot_send_exam_info(mock_db, mock_repo, applicant, pending_application):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate({"examInfo": {"centerName": "Kondotty"}})

    with pytest.raises(ReadOnlyFieldError):
        await update_application(mock_db, applicant, pending_application.id, data)

    assert pending_application.exam_center_name is None
    mock_repo.save.assert_not_called()


@pytest.mark.asyncio
async def test_admin_cannot_patch_payment_fields(mock_db, mock_repo, admin, pending_application):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate({"paymentInfo": {"amount": 1}})

    with pytest.raises(ReadOnlyFieldError) as exc_info:
        await update_application(mock_db, admin, pending_application.id, data)

    assert exc_info.value.error_code == "READ_ONLY_FIELDS"


@pytest.mark.asyncio
async def test_admin_patch_approval_notifies_owner(
    mock_db, mock_repo, admin, pending_application, applicant_record
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate({"status": {"isApproved": True}})

    with (
        patch(f"{SERVICE}.UserRepository") as mock_users,
        patch(f"{SERVICE}.notification_service") as mock_notifications,
    ):
        mock_users.get_by_uid = AsyncMock(return_value=applicant_record)
        mock_notifications.notify_user = AsyncMock()

        result = await update_application(mock_db, admin, pending_application.id, data)

    assert result.is_approved is True
    assert result.reviewed_by == "admin-uid"
    mock_repo.save.assert_awaited_once()
    mock_notifications.notify_user.assert_awaited_once()
    assert "approved" in mock_notifications.notify_user.await_args.args[2]


@pytest.mark.asyncio
async def test_admin_patch_repeating_approval_sends_nothing(
    mock_db, mock_repo, admin, approved_application
):
    mock_repo.get_by_id = AsyncMock(return_value=approved_application)
    data = ApplicationUpdate.model_validate({"status": {"isApproved": True}})

    with patch(f"{SERVICE}.notification_service") as mock_notifications:
        mock_notifications.notify_user = AsyncMock()
        await update_application(mock_db, admin, approved_application.id, data)

    mock_notifications.notify_user.assert_not_called()


@pytest.mark.asyncio
async def test_admin_patch_approves_and_schedules_in_one_commit(
    mock_db, mock_repo, admin, pending_application, applicant_record
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate(
        {
            "status": {"isApproved": True, "isQualified": True},
            "examInfo": {"centerName": "Kondotty", "examDate": "2025-05-10"},
        }
    )

    with (
        patch(f"{SERVICE}.UserRepository") as mock_users,
        patch(f"{SERVICE}.notification_service") as mock_notifications,
    ):
        mock_users.get_by_uid = AsyncMock(return_value=applicant_record)
        mock_notifications.notify_user = AsyncMock()

        result = await update_application(mock_db, admin, pending_application.id, data)

    assert result.is_approved is True
    assert result.is_qualified is True
    assert result.exam_center_name == "Kondotty"
    assert result.exam_date == date(2025, 5, 10)
    assert result.hall_ticket_issued is True
    mock_repo.save.assert_awaited_once()


@pytest.mark.asyncio
async def test_admin_patch_qualification_requires_approval(
    mock_db, mock_repo, admin, pending_application
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate({"status": {"isQualified": True}})

    with pytest.raises(NotApprovedError):
        await update_application(mock_db, admin, pending_application.id, data)

    mock_repo.save.assert_not_called()


@pytest.mark.asyncio
async def test_admin_patch_clears_department(mock_db, mock_repo, admin, application_factory):
    application = application_factory(department_id=uuid4())
    mock_repo.get_by_id = AsyncMock(return_value=application)
    data = ApplicationUpdate.model_validate({"status": {"departmentId": None}})

    result = await update_application(mock_db, admin, application.id, data)

    assert result.department_id is None
    mock_repo.save.assert_awaited_once()


@pytest.mark.asyncio
async def test_admin_patch_unknown_department(mock_db, mock_repo, admin, pending_application):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)
    data = ApplicationUpdate.model_validate({"status": {"departmentId": str(uuid4())}})

    with patch(f"{SERVICE}.department_repository") as mock_departments:
        mock_departments.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(DepartmentNotFoundError):
            await update_application(mock_db, admin, pending_application.id, data)

    mock_repo.save.assert_not_called()


# ============================================
# set_approval
# ============================================


@pytest.mark.asyncio
async def test_approval_notifies_owner_by_email_and_sms(
    mock_db, mock_repo, admin, pending_application, applicant_record
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with (
        patch(f"{SERVICE}.UserRepository") as mock_users,
        patch(
            "admissions.modules.notifications.service.enqueue", new_callable=AsyncMock
        ) as mock_enqueue,
    ):
        mock_users.get_by_uid = AsyncMock(return_value=applicant_record)

        result = await set_approval(mock_db, admin, pending_application.id, True)

    assert result.is_approved is True
    assert result.reviewed_by == "admin-uid"
    assert mock_enqueue.await_count == 2

    channels = [call.kwargs["type"].value for call in mock_enqueue.await_args_list]
    assert channels == ["email", "sms"]

    first = mock_enqueue.await_args_list[0].kwargs
    assert first["user_id"] == "applicant-uid"
    assert "approved" in first["message"]
    assert "EXM20250001" in first["message"]
    assert first["metadata"] == {
        "applicationId": str(pending_application.id),
        "applicationNo": "EXM20250001",
        "statusChange": "approved",
    }


@pytest.mark.asyncio
async def test_approval_without_phone_sends_email_only(
    mock_db, mock_repo, admin, pending_application, applicant_record
):
    applicant_record.phone_number = None
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with (
        patch(f"{SERVICE}.UserRepository") as mock_users,
        patch(
            "admissions.modules.notifications.service.enqueue", new_callable=AsyncMock
        ) as mock_enqueue,
    ):
        mock_users.get_by_uid = AsyncMock(return_value=applicant_record)
        await set_approval(mock_db, admin, pending_application.id, True)

    assert mock_enqueue.await_count == 1
    assert mock_enqueue.await_args.kwargs["type"].value == "email"


@pytest.mark.asyncio
async def test_repeated_approval_sends_nothing(mock_db, mock_repo, admin, approved_application):
    mock_repo.get_by_id = AsyncMock(return_value=approved_application)

    with patch(f"{SERVICE}.notification_service") as mock_notifications:
        mock_notifications.notify_user = AsyncMock()
        await set_approval(mock_db, admin, approved_application.id, True)

    mock_notifications.notify_user.assert_not_called()
    mock_repo.save.assert_awaited_once()


@pytest.mark.asyncio
async def test_notification_failure_does_not_undo_approval(
    mock_db, mock_repo, admin, pending_application, applicant_record
):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with (
        patch(f"{SERVICE}.UserRepository") as mock_users,
        patch(f"{SERVICE}.notification_service") as mock_notifications,
    ):
        mock_users.get_by_uid = AsyncMock(return_value=applicant_record)
        mock_notifications.notify_user = AsyncMock(side_effect=RuntimeError("smtp down"))

        result = await set_approval(mock_db, admin, pending_application.id, True)

    assert result.is_approved is True
    mock_repo.save.assert_awaited_once()


# ============================================
# Other transitions
# ============================================


@pytest.mark.asyncio
async def test_qualification_requires_approval(mock_db, mock_repo, admin, pending_application):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with pytest.raises(NotApprovedError):
        await set_qualification(mock_db, admin, pending_application.id, True)

    mock_repo.save.assert_not_called()


@pytest.mark.asyncio
async def test_qualify_approved_application(mock_db, mock_repo, admin, approved_application):
    mock_repo.get_by_id = AsyncMock(return_value=approved_application)

    result = await set_qualification(mock_db, admin, approved_application.id, True)

    assert result.is_qualified is True


@pytest.mark.asyncio
async def test_assign_unknown_department(mock_db, mock_repo, admin, pending_application):
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with patch(f"{SERVICE}.department_repository") as mock_departments:
        mock_departments.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(DepartmentNotFoundError):
            await assign_department(mock_db, admin, pending_application.id, uuid4())

    assert pending_application.department_id is None


@pytest.mark.asyncio
async def test_assign_existing_department(mock_db, mock_repo, admin, pending_application):
    department_id = uuid4()
    mock_repo.get_by_id = AsyncMock(return_value=pending_application)

    with patch(f"{SERVICE}.department_repository") as mock_departments:
        mock_departments.get_by_id = AsyncMock(return_value=MagicMock(id=department_id))
        result = await assign_department(mock_db, admin, pending_application.id, department_id)

    assert result.department_id == department_id


@pytest.mark.asyncio
async def test_schedule_exam_issues_hall_ticket(mock_db, mock_repo, admin, approved_application):
    mock_repo.get_by_id = AsyncMock(return_value=approved_application)

    result = await schedule_exam(
        mock_db,
        admin,
        approved_application.id,
        ExamScheduleRequest(center_name="Main Campus", exam_date=date(2025, 5, 10)),
    )

    assert result.exam_center_name == "Main Campus"
    assert result.hall_ticket_issued is True


# ============================================
# list_applications
# ============================================


@pytest.mark.asyncio
async def test_admin_list_passes_filters(mock_db, mock_repo, admin):
    department_id = uuid4()
    mock_repo.list_applications = AsyncMock(return_value=([], 0))

    applications, pagination = await list_applications(
        mock_db,
        admin,
        status="approved",
        department_id=department_id,
        search="  EXM2025 ",
        page=2,
        limit=10,
    )

    assert applications == []
    assert pagination == {"page": 2, "limit": 10, "total": 0, "total_pages": 0}
    mock_repo.list_applications.assert_awaited_once_with(
        mock_db,
        status="approved",
        department_id=department_id,
        search="EXM2025",
        page=2,
        limit=10,
    )


@pytest.mark.asyncio
async def test_user_list_ignores_filters(mock_db, mock_repo, applicant):
    mock_repo.list_applications = AsyncMock(return_value=([], 0))

    await list_applications(mock_db, applicant, status="approved", search="someone")

    mock_repo.list_applications.assert_awaited_once_with(
        mock_db, user_id="applicant-uid", page=1, limit=20
    )


@pytest.mark.asyncio
async def test_list_limit_is_capped(mock_db, mock_repo, admin):
    mock_repo.list_applications = AsyncMock(return_value=([], 250))

    _, pagination = await list_applications(mock_db, admin, limit=500)

    assert pagination["limit"] == 100
    assert pagination["total_pages"] == 3
