from datetime import datetime, UTC
from typing import TYPE_CHECKING, Any
from uuid import UUID

from advanced_alchemy.types import JsonB
from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formforge.db.base import Base

if TYPE_CHECKING:
    from formforge.db.models.form import Form


class Submission(Base):
    """One respondent's answers to a form, keyed by field id."""

    __tablename__ = "submissions"

    # Cascade delete when the form is deleted
    form_id: Mapped[UUID] = mapped_column(
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    form: Mapped["Form"] = relationship("Form", back_populates="submissions")

    data: Mapped[dict[str, Any]] = mapped_column(JsonB, nullable=False, default=dict)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
    # Long enough for an IPv6 address
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
