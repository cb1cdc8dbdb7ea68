"""Export service that flattens submissions into response tables."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from formforge.db.models import Form, Submission
from formforge.db.services.submission_service import get_submission_with_form
from formforge.lib import observability

SUBMISSION_ID_COLUMN = "Submission ID"
SUBMITTED_AT_COLUMN = "Submitted At"


@dataclass
class ResponseTable:
    """Submissions laid out as rows under one column per form field."""

    form: Form
    columns: list[str]
    rows: list[list[Any]]


def _field_columns(form: Form) -> list[tuple[str, str]]:
    """(field id, column heading) pairs, falling back to the id for unlabeled fields."""
    return [(field["id"], field.get("label") or field["id"]) for field in form.fields]


def _build_table(form: Form, submissions: list[Submission]) -> ResponseTable:
    field_columns = _field_columns(form)
    columns = [SUBMISSION_ID_COLUMN, SUBMITTED_AT_COLUMN, *(heading for _, heading in field_columns)]
    rows = [
        [
            str(submission.id),
            submission.submitted_at.isoformat() if submission.submitted_at else None,
            *(submission.data.get(field_id) for field_id, _ in field_columns),
        ]
        for submission in submissions
    ]
    return ResponseTable(form=form, columns=columns, rows=rows)


async def export_form_responses(
    db_session: AsyncSession,
    form_id: UUID,
) -> ResponseTable | None:
    """Export every submission of a form, most recent first.

    Args:
        db_session: Database session
        form_id: Form whose responses to export

    Returns:
        ResponseTable or None if the form does not exist
    """
    with observability.span("submission.export", form_id=str(form_id)):
        result = await db_session.execute(select(Form).where(Form.id == form_id))
        form = result.scalar_one_or_none()
        if not form:
            return None

        result = await db_session.execute(
            select(Submission)
            .where(Submission.form_id == form_id)
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        )
        return _build_table(form, list(result.scalars().all()))


async def export_submission(
    db_session: AsyncSession,
    form_id: UUID,
    submission_id: UUID,
) -> ResponseTable | None:
    """Export a single submission as a one-row table.

    Returns:
        ResponseTable or None if the submission does not exist or belongs
        to another form
    """
    with observability.span("submission.export", form_id=str(form_id), submission_id=str(submission_id)):
        submission = await get_submission_with_form(db_session, submission_id)
        if not submission or submission.form_id != form_id:
            return None
        return _build_table(submission.form, [submission])
