"""Submission service for storing and reading form responses."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from formforge.db.models import Form, Submission
from formforge.db.services.pagination import Paginated
from formforge.fields import parse_fields, validate_submission
from formforge.lib import observability
from formforge.lib.hooks import hooks, AFTER_SUBMISSION_CREATE, SUBMISSION_DATA

logger = logging.getLogger(__name__)


async def create_submission(
    db_session: AsyncSession,
    form_id: UUID,
    data: dict[str, Any],
    ip_address: str | None = None,
) -> Submission | None:
    """Validate and store a submission for a form.

    Args:
        db_session: Database session
        form_id: ID of the form being answered
        data: Raw answers keyed by field id
        ip_address: Submitter address, if known

    Returns:
        Created Submission or None if the form does not exist

    Raises:
        SubmissionValidationError: If the answers fail the form's rules
    """
    with observability.span("submission.create", form_id=str(form_id)):
        result = await db_session.execute(select(Form).where(Form.id == form_id))
        form = result.scalar_one_or_none()
        if not form:
            return None

        cleaned = validate_submission(parse_fields(form.fields), data)
        cleaned = await hooks.apply_filters(SUBMISSION_DATA, cleaned, form)

        submission = Submission(form_id=form.id, data=cleaned, ip_address=ip_address)
        db_session.add(submission)
        try:
            await db_session.commit()
        except IntegrityError:
            # Form was deleted between the lookup and the insert
            await db_session.rollback()
            logger.warning("Form %s disappeared while storing a submission", form_id)
            observability.warn("Form {form_id} disappeared while storing a submission", form_id=str(form_id))
            return None
        await db_session.refresh(submission)

        await hooks.do_action(AFTER_SUBMISSION_CREATE, submission, form)

        return submission


async def list_submissions(
    db_session: AsyncSession,
    form_id: UUID,
    limit: int = 50,
    offset: int = 0,
) -> Paginated[Submission]:
    """List a form's submissions, most recent first.

    Args:
        db_session: Database session
        form_id: Form whose submissions to list
        limit: Maximum number of submissions to return
        offset: Number of submissions to skip

    Returns:
        A page of submissions; empty when the form has none or does not exist
    """
    query = (
        select(Submission)
        .where(Submission.form_id == form_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db_session.execute(query)
    items = list(result.scalars().all())

    total_result = await db_session.execute(
        select(func.count(Submission.id)).where(Submission.form_id == form_id)
    )
    total = total_result.scalar_one()

    return Paginated(items=items, total=total, limit=limit, offset=offset)


async def get_submission_with_form(
    db_session: AsyncSession,
    submission_id: UUID,
) -> Submission | None:
    """Get a submission with its form eagerly loaded."""
    result = await db_session.execute(
        select(Submission)
        .where(Submission.id == submission_id)
        .options(selectinload(Submission.form))
    )
    return result.scalar_one_or_none()
