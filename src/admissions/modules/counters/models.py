"""
Counter Models

Named monotonically increasing sequences.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from admissions.core.database import Base


class Counter(Base):
    """A named sequence; ``sequence`` holds the last value handed out."""

    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Counter(name={self.name}, sequence={self.sequence})>"
