import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from classgrid.db.base import Base


class SessionBlock(Base):
    """A subject section placed on the grid, shared by every schedule generated for it."""

    __tablename__ = "session_blocks"
    __table_args__ = (
        UniqueConstraint(
            "year_level",
            "subject_code",
            "course_combination",
            "block_number",
            name="uq_session_blocks_identity",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    year_level: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    subject_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    # Sorted, comma separated program codes, e.g. "BSCS,BSIT" for a fused block.
    course_combination: Mapped[str] = mapped_column(String(200), nullable=False)
    block_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    units: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    @property
    def cohort(self) -> tuple[int, int]:
        """Year level and block number; blocks sharing it share their students."""
        return (self.year_level, self.block_number)

    @property
    def display_code(self) -> str:
        return f"{self.subject_code}-B{self.block_number}"
