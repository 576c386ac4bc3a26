"""
Application Repository

Database operations for applications: creation, lookups, filtered and
paginated listing, and dashboard counts.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Application, PaymentStatus

# Status filter name -> SQL condition. These are list filters, not derived
# states: "approved" also matches qualified and disqualified rows, and
# "qualified" does not check approval. get_stats buckets by derived state.
STATUS_CONDITIONS = {
    "pending": and_(Application.is_approved.is_(False), Application.reviewed_at.is_(None)),
    "approved": Application.is_approved.is_(True),
    "disapproved": and_(
        Application.is_approved.is_(False), Application.reviewed_at.is_not(None)
    ),
    "qualified": Application.is_qualified.is_(True),
    "disqualified": and_(
        Application.is_qualified.is_(False), Application.reviewed_at.is_not(None)
    ),
}


def _search_condition(search: str):
    pattern = f"%{search}%"
    return or_(
        Application.application_no.ilike(pattern),
        Application.personal_info["name"].astext.ilike(pattern),
        Application.contact_info["mobileNumber"].astext.ilike(pattern),
        Application.contact_info["email"].astext.ilike(pattern),
    )


async def create(
    db: AsyncSession,
    *,
    application_no: str,
    user_id: str,
    personal_info: dict[str, Any],
    address_info: dict[str, Any],
    contact_info: dict[str, Any],
    educational_info: dict[str, Any],
    payment_transaction_id: str,
    payment_order_id: str,
    payment_amount: Decimal,
    payment_date: datetime,
) -> Application:
    """
    Create a pending application.

    Commits together with the counter increment made earlier in the same
    session.
    """
    application = Application(
        application_no=application_no,
        user_id=user_id,
        personal_info=personal_info,
        address_info=address_info,
        contact_info=contact_info,
        educational_info=educational_info,
        payment_transaction_id=payment_transaction_id,
        payment_order_id=payment_order_id,
        payment_amount=payment_amount,
        payment_date=payment_date,
        payment_status=PaymentStatus.COMPLETED,
        is_approved=False,
        hall_ticket_issued=False,
    )

    db.add(application)
    await db.commit()
    await db.refresh(application)

    return application


async def get_by_id(db: AsyncSession, id: UUID) -> Application | None:
    """Get application by ID."""
    return await db.get(Application, id)


async def get_by_number(db: AsyncSession, application_no: str) -> Application | None:
    result = await db.execute(
        select(Application).where(Application.application_no == application_no)
    )
    return result.scalar_one_or_none()


async def get_by_transaction_id(db: AsyncSession, transaction_id: str) -> Application | None:
    result = await db.execute(
        select(Application).where(Application.payment_transaction_id == transaction_id)
    )
    return result.scalar_one_or_none()


async def list_applications(
    db: AsyncSession,
    *,
    user_id: str | None = None,
    status: str | None = None,
    department_id: UUID | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Application], int]:
    """
    List applications with optional filters and pagination.

    Args:
        db: Database session
        user_id: Restrict to one owner
        status: One of STATUS_CONDITIONS
        department_id: Restrict to one department
        search: Case-insensitive match on number, name, mobile or email
        page: 1-based page number
        limit: Page size

    Returns:
        Tuple of (applications on the page, total matching count)
    """
    conditions = []
    if user_id is not None:
        conditions.append(Application.user_id == user_id)
    if status:
        conditions.append(STATUS_CONDITIONS[status])
    if department_id is not None:
        conditions.append(Application.department_id == department_id)
    if search:
        conditions.append(_search_condition(search))

    count_query = select(func.count()).select_from(Application).where(*conditions)
    total = (await db.execute(count_query)).scalar_one()

    offset = (page - 1) * limit
    query = (
        select(Application)
        .where(*conditions)
        .order_by(Application.applied_at.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(query)
    applications = list(result.scalars().all())

    return applications, total


async def get_stats(db: AsyncSession) -> dict[str, int]:
    """Count applications per derived state, plus issued hall tickets."""

    def _count(condition):
        return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

    query = select(
        func.count(Application.id).label("total"),
        _count(STATUS_CONDITIONS["pending"]).label("pending"),
        # Approved with qualification undecided
        _count(
            and_(
                Application.is_approved.is_(True),
                or_(
                    Application.is_qualified.is_(None),
                    and_(Application.is_qualified.is_(False), Application.reviewed_at.is_(None)),
                ),
            )
        ).label("approved"),
        _count(STATUS_CONDITIONS["disapproved"]).label("disapproved"),
        _count(
            and_(Application.is_approved.is_(True), Application.is_qualified.is_(True))
        ).label("qualified"),
        _count(
            and_(Application.is_approved.is_(True), STATUS_CONDITIONS["disqualified"])
        ).label("disqualified"),
        _count(Application.hall_ticket_issued.is_(True)).label("hall_tickets_issued"),
    )
    row = (await db.execute(query)).one()
    return {key: int(value) for key, value in row._mapping.items()}


async def save(db: AsyncSession, application: Application) -> Application:
    """Commit pending changes to an application and reload it."""
    await db.commit()
    await db.refresh(application)
    return application
