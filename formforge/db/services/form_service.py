"""Form service for CRUD operations on forms."""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from formforge.db.models import Form, Submission
from formforge.db.services.pagination import Paginated
from formforge.fields import dump_fields, parse_fields
from formforge.lib import observability
from formforge.lib.hooks import hooks, AFTER_FORM_DELETE, AFTER_FORM_SAVE, BEFORE_FORM_DELETE, BEFORE_FORM_SAVE

logger = logging.getLogger(__name__)

_UNSET: Any = object()  # Sentinel for distinguishing None from "not provided"


@dataclass
class FormSummary:
    """A form as shown in a listing, with its submission count."""

    form: Form
    submission_count: int


@dataclass
class FormDetail:
    """A form together with its most recent submissions."""

    form: Form
    submissions: list[Submission]


def _normalize_fields(fields: list[Any]) -> list[dict[str, Any]]:
    """Validate field definitions and return their canonical stored form.

    Raises:
        FieldDefinitionError: If any definition is invalid.
    """
    return dump_fields(parse_fields(fields))


def _apply_field_updates(form: Form, updates: dict[str, Any]) -> None:
    """Set each provided attribute on the form, skipping _UNSET values."""
    for name, value in updates.items():
        if value is not _UNSET:
            setattr(form, name, value)


async def list_forms(
    db_session: AsyncSession,
    limit: int = 10,
    offset: int = 0,
) -> Paginated[FormSummary]:
    """List forms newest first, each with its submission count.

    Args:
        db_session: Database session
        limit: Maximum number of forms to return
        offset: Number of forms to skip

    Returns:
        A page of FormSummary objects with total and has_more metadata
    """
    submission_count = (
        select(func.count(Submission.id))
        .where(Submission.form_id == Form.id)
        .correlate(Form)
        .scalar_subquery()
    )
    query = (
        select(Form, submission_count.label("submission_count"))
        .order_by(Form.created_at.desc(), Form.id.desc())
        .offset(offset)
        .limit(limit)
    )

    result = await db_session.execute(query)
    items = [FormSummary(form=form, submission_count=count or 0) for form, count in result.all()]

    total_result = await db_session.execute(select(func.count()).select_from(Form))
    total = total_result.scalar_one()

    return Paginated(items=items, total=total, limit=limit, offset=offset)


async def get_form_by_id(
    db_session: AsyncSession,
    form_id: UUID,
) -> Form | None:
    """Get a single form by ID, or None if it does not exist."""
    result = await db_session.execute(select(Form).where(Form.id == form_id))
    return result.scalar_one_or_none()


async def get_form_detail(
    db_session: AsyncSession,
    form_id: UUID,
    recent: int = 10,
) -> FormDetail | None:
    """Get a form with its ``recent`` most recent submissions.

    Returns:
        FormDetail or None if the form does not exist
    """
    form = await get_form_by_id(db_session, form_id)
    if not form:
        return None

    result = await db_session.execute(
        select(Submission)
        .where(Submission.form_id == form_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .limit(recent)
    )
    return FormDetail(form=form, submissions=list(result.scalars().all()))


async def create_form(
    db_session: AsyncSession,
    title: str,
    fields: list[Any],
    description: str | None = None,
    settings: dict[str, Any] | None = None,
) -> Form:
    """Create a new form.

    Args:
        db_session: Database session
        title: Form title
        fields: Field definitions (validated and normalized before storing)
        description: Optional description shown above the fields
        settings: Optional form-level settings, stored as given

    Returns:
        Created Form object

    Raises:
        FieldDefinitionError: If the field definitions are invalid
    """
    with observability.span("form.create", title=title):
        form = Form(
            title=title,
            description=description,
            fields=_normalize_fields(fields),
            settings=settings,
        )

        await hooks.do_action(BEFORE_FORM_SAVE, form, is_new=True)

        db_session.add(form)
        await db_session.commit()
        await db_session.refresh(form)
        logger.info("Created form %s", form.id)

        await hooks.do_action(AFTER_FORM_SAVE, form, is_new=True)

        return form


async def update_form(
    db_session: AsyncSession,
    form_id: UUID,
    title: str | object = _UNSET,
    description: str | None | object = _UNSET,
    fields: list[Any] | object = _UNSET,
    settings: dict[str, Any] | None | object = _UNSET,
) -> Form | None:
    """Update an existing form.

    Omitted arguments are left alone; pass None to clear description or
    settings.

    Returns:
        Updated Form object or None if not found

    Raises:
        FieldDefinitionError: If new field definitions are invalid
    """
    with observability.span("form.update", form_id=str(form_id)):
        form = await get_form_by_id(db_session, form_id)
        if not form:
            return None

        if fields is not _UNSET:
            fields = _normalize_fields(fields)

        await hooks.do_action(BEFORE_FORM_SAVE, form, is_new=False)

        _apply_field_updates(
            form,
            {"title": title, "description": description, "fields": fields, "settings": settings},
        )

        await db_session.commit()
        await db_session.refresh(form)

        await hooks.do_action(AFTER_FORM_SAVE, form, is_new=False)

        return form


async def delete_form(
    db_session: AsyncSession,
    form_id: UUID,
) -> bool:
    """Delete a form and all of its submissions.

    Returns:
        True if deleted, False if not found
    """
    with observability.span("form.delete", form_id=str(form_id)):
        form = await get_form_by_id(db_session, form_id)
        if not form:
            return False

        await hooks.do_action(BEFORE_FORM_DELETE, form)

        # Explicit so SQLite without foreign key enforcement behaves the same
        await db_session.execute(delete(Submission).where(Submission.form_id == form_id))
        await db_session.delete(form)
        await db_session.commit()
        logger.info("Deleted form %s", form_id)

        await hooks.do_action(AFTER_FORM_DELETE, form)

        return True
