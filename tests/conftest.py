"""
Shared fixtures for the admissions test suite.
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from admissions.core.auth import CurrentUser, get_current_user
from admissions.core.database import get_db
from admissions.main import app
from admissions.modules.applications.models import Application, PaymentStatus
from admissions.modules.users.models import User, UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock(return_value=MagicMock())
    db.add = MagicMock()
    return db


@pytest.fixture
def applicant():
    """An ordinary signed-in applicant."""
    return CurrentUser(
        id=uuid4(),
        uid="applicant-uid",
        role=UserRole.USER,
        phone_number="+919876543210",
        email="applicant@example.com",
    )


@pytest.fixture
def other_applicant():
    return CurrentUser(id=uuid4(), uid="someone-else", role=UserRole.USER)


@pytest.fixture
def admin():
    """A signed-in admin."""
    return CurrentUser(id=uuid4(), uid="admin-uid", role=UserRole.ADMIN)


@pytest.fixture
def applicant_record():
    """The applicant's stored user record."""
    user = MagicMock(spec=User)
    user.id = uuid4()
    user.uid = "applicant-uid"
    user.role = UserRole.USER
    user.phone_number = "+919876543210"
    user.email = "applicant@example.com"
    return user


def make_application(**overrides) -> Application:
    """Build a transient Application with realistic content."""
    now = datetime(2025, 3, 1, 9, 30, tzinfo=UTC)
    fields = {
        "id": uuid4(),
        "application_no": "EXM20250001",
        "user_id": "applicant-uid",
        "personal_info": {
            "name": "Muhammed Ali",
            "fatherName": "Abdul Rahman",
            "motherName": "Fathima",
            "dateOfBirth": "2009-06-14",
        },
        "address_info": {
            "place": "Kondotty",
            "postOffice": "Kondotty",
            "pinCode": "673638",
            "district": "Malappuram",
            "state": "Kerala",
        },
        "contact_info": {"mobileNumber": "+919876543210", "email": "applicant@example.com"},
        "educational_info": {"school": "GVHSS Kondotty", "medium": "Malayalam"},
        "payment_transaction_id": "pay_TEST0001",
        "payment_order_id": "order_TEST0001",
        "payment_amount": Decimal("500.00"),
        "payment_date": now,
        "payment_status": PaymentStatus.COMPLETED,
        "is_approved": False,
        "is_qualified": None,
        "department_id": None,
        "applied_at": now,
        "reviewed_by": None,
        "reviewed_at": None,
        "exam_center_name": None,
        "exam_date": None,
        "exam_time": None,
        "hall_ticket_issued": False,
        "hall_ticket_issued_at": None,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Application(**fields)


@pytest.fixture
def pending_application():
    return make_application()


@pytest.fixture
def approved_application():
    return make_application(
        is_approved=True,
        reviewed_by="admin-uid",
        reviewed_at=datetime(2025, 3, 5, 12, 0, tzinfo=UTC),
    )


@pytest.fixture
def application_factory():
    """Factory for transient applications; keyword arguments override fields."""
    return make_application


@pytest.fixture
def api_app(mock_db):
    """The FastAPI app with the database replaced by ``mock_db``."""

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in(api_app):
    """Make every request come from ``user``."""

    def _sign_in(user: CurrentUser) -> None:
        api_app.dependency_overrides[get_current_user] = lambda: user

    return _sign_in
