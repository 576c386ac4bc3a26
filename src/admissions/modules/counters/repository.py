"""
Counter Repository

Sequence allocation. The whole read-increment-write happens in a single
INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement, so concurrent
callers serialise on the row lock and never observe the same value.
"""

import logging

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.modules.counters.models import Counter

logger = logging.getLogger(__name__)

APPLICATION_NUMBER_SERIES = "applicationNo"


def build_next_sequence_statement(name: str):
    """Build the upsert that creates the counter at 1 or increments it."""
    stmt = insert(Counter).values(name=name, sequence=1)
    return stmt.on_conflict_do_update(
        index_elements=[Counter.name],
        set_={"sequence": Counter.sequence + 1},
    ).returning(Counter.sequence)


async def next_sequence(db: AsyncSession, name: str) -> int:
    """
    Allocate the next value of the named sequence.

    The caller owns the transaction: the increment becomes durable when the
    caller commits, and is discarded on rollback.

    Args:
        db: Database session
        name: Series name, e.g. APPLICATION_NUMBER_SERIES

    Returns:
        The allocated value (1 for a new series)
    """
    result = await db.execute(build_next_sequence_statement(name))
    value = result.scalar_one()
    logger.debug(f"Allocated {name} sequence value {value}")
    return value
