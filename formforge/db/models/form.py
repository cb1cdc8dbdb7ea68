from typing import TYPE_CHECKING, Any

from advanced_alchemy.types import JsonB
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formforge.db.base import Base

if TYPE_CHECKING:
    from formforge.db.models.submission import Submission


class Form(Base):
    """A form definition: metadata plus the list of typed fields."""

    __tablename__ = "forms"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Field definitions as the client sends them (camelCase keys)
    fields: Mapped[list[dict[str, Any]]] = mapped_column(JsonB, nullable=False, default=list)
    settings: Mapped[dict[str, Any] | None] = mapped_column(JsonB, nullable=True)

    submissions: Mapped[list["Submission"]] = relationship(
        "Submission",
        back_populates="form",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Submission.submitted_at)",
        lazy="noload",
    )
