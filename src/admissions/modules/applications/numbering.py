"""
Application Numbering

Application numbers look like ``EXM20250001``: a prefix, the four-digit
year of issue, and the global sequence zero-padded to at least four
digits. Sequences past 9999 simply grow longer.
"""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.config import settings
from admissions.modules.counters.repository import APPLICATION_NUMBER_SERIES, next_sequence


def format_application_number(year: int, sequence: int, prefix: str | None = None) -> str:
    return f"{prefix or settings.application_number_prefix}{year:04d}{sequence:04d}"


async def generate_application_number(db: AsyncSession, now: datetime | None = None) -> str:
    """
    Allocate the next application number.

    The counter increment joins the caller's transaction.
    """
    sequence = await next_sequence(db, APPLICATION_NUMBER_SERIES)
    year = (now or datetime.now(UTC)).year
    return format_application_number(year, sequence)
