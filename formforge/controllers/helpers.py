"""Shared helpers for the API controllers."""

from typing import Any
from uuid import UUID

from litestar import Request
from litestar.exceptions import ClientException

from formforge.config import Settings
from formforge.db.models import Form, Submission
from formforge.db.services.export_service import ResponseTable


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def parse_uuid(value: Any) -> UUID | None:
    """Parse an id from a path or payload, returning None if it is not a UUID."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


# Largest value a SQL BIGINT (and SQLite INTEGER) can hold
MAX_OFFSET = 2**63 - 1


def _to_int(raw: str | None) -> int | None:
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def parse_pagination(
    limit: str | None,
    offset: str | None,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """Turn raw ``limit``/``offset`` query values into a clamped pair.

    Missing, zero or non-numeric limits use ``default_limit``; non-numeric
    offsets become 0. Negative values and offsets past ``MAX_OFFSET`` are
    rejected.
    """
    parsed_limit = _to_int(limit)
    parsed_offset = _to_int(offset)

    bad_limit = parsed_limit is not None and parsed_limit < 0
    bad_offset = parsed_offset is not None and not 0 <= parsed_offset <= MAX_OFFSET
    if bad_limit or bad_offset:
        raise ClientException("Invalid limit or offset")

    if not parsed_limit:
        parsed_limit = default_limit
    return min(parsed_limit, max_limit), parsed_offset or 0


def client_ip(request: Request) -> str | None:
    """Best-effort submitter address: first X-Forwarded-For hop, else the peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop[:45]
    if request.client:
        return request.client.host[:45]
    return None


def _timestamp(value) -> str | None:
    return value.isoformat() if value else None


def form_to_dict(
    form: Form,
    submission_count: int | None = None,
    submissions: list[Submission] | None = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": str(form.id),
        "title": form.title,
        "description": form.description,
        "fields": form.fields,
        "settings": form.settings,
        "createdAt": _timestamp(form.created_at),
        "updatedAt": _timestamp(form.updated_at),
    }
    if submission_count is not None:
        data["submissionCount"] = submission_count
    if submissions is not None:
        data["submissions"] = [submission_to_dict(s) for s in submissions]
    return data


def submission_to_dict(submission: Submission, form: Form | None = None) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": str(submission.id),
        "formId": str(submission.form_id),
        "data": submission.data,
        "submittedAt": _timestamp(submission.submitted_at),
        "ipAddress": submission.ip_address,
    }
    if form is not None:
        data["form"] = form_to_dict(form)
    return data


def response_table_to_dict(table: ResponseTable) -> dict[str, Any]:
    return {
        "formId": str(table.form.id),
        "formTitle": table.form.title,
        "columns": table.columns,
        "rows": table.rows,
    }
