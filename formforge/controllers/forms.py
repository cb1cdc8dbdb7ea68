"""REST endpoints for forms."""

from typing import Any

from litestar import Controller, Request, Response, delete, get, post, put
from litestar.status_codes import HTTP_201_CREATED, HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND
from sqlalchemy.ext.asyncio import AsyncSession

from formforge.controllers.helpers import (
    form_to_dict,
    get_app_settings,
    parse_pagination,
    parse_uuid,
    response_table_to_dict,
)
from formforge.db.services import export_service, form_service
from formforge.fields import default_values, parse_fields, submission_json_schema
from formforge.lib.responses import error_response, success_response

FORM_NOT_FOUND = "Form not found"
SUBMISSION_NOT_FOUND = "Submission not found"


def _check_optional_types(data: dict[str, Any]) -> Response | None:
    """Reject a non-text description or a non-object settings value."""
    description = data.get("description")
    if description is not None and not isinstance(description, str):
        return error_response("Description must be text", HTTP_400_BAD_REQUEST)
    settings = data.get("settings")
    if settings is not None and not isinstance(settings, dict):
        return error_response("Settings must be an object", HTTP_400_BAD_REQUEST)
    return None


class FormsController(Controller):
    path = "/api/forms"

    @get("/")
    async def list_forms(
        self,
        request: Request,
        db_session: AsyncSession,
        limit: str | None = None,
        offset: str | None = None,
    ) -> Response:
        """List forms newest first with submission counts."""
        api = get_app_settings(request).api
        limit_value, offset_value = parse_pagination(limit, offset, api.default_form_limit, api.max_limit)

        page = await form_service.list_forms(db_session, limit=limit_value, offset=offset_value)
        return success_response(
            {
                "forms": [form_to_dict(s.form, submission_count=s.submission_count) for s in page.items],
                "total": page.total,
                "hasMore": page.has_more,
            }
        )

    @post("/")
    async def create_form(self, db_session: AsyncSession, data: dict[str, Any]) -> Response:
        """Create a form from a title and a list of field definitions."""
        title = data.get("title")
        fields = data.get("fields")
        if not isinstance(title, str) or not title or fields is None:
            return error_response("Title and fields are required", HTTP_400_BAD_REQUEST)
        if bad_type := _check_optional_types(data):
            return bad_type

        form = await form_service.create_form(
            db_session,
            title=title,
            fields=fields,
            description=data.get("description"),
            settings=data.get("settings"),
        )
        return success_response(form_to_dict(form), HTTP_201_CREATED)

    @get("/{form_id:str}")
    async def get_form(self, request: Request, db_session: AsyncSession, form_id: str) -> Response:
        """Get a form with its most recent submissions."""
        uid = parse_uuid(form_id)
        if not uid:
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        recent = get_app_settings(request).api.recent_submissions
        detail = await form_service.get_form_detail(db_session, uid, recent=recent)
        if not detail:
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        return success_response(form_to_dict(detail.form, submissions=detail.submissions))

    @put("/{form_id:str}")
    async def update_form(self, db_session: AsyncSession, form_id: str, data: dict[str, Any]) -> Response:
        """Partially update a form. Only keys present in the body change."""
        if "title" in data and (not isinstance(data["title"], str) or not data["title"]):
            return error_response("Title must be at least 1 character", HTTP_400_BAD_REQUEST)
        if bad_type := _check_optional_types(data):
            return bad_type

        uid = parse_uuid(form_id)
        if not uid:
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        changes = {key: data[key] for key in ("title", "description", "fields", "settings") if key in data}
        form = await form_service.update_form(db_session, uid, **changes)
        if not form:
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        return success_response(form_to_dict(form))

    @delete("/{form_id:str}", status_code=200)
    async def delete_form(self, db_session: AsyncSession, form_id: str) -> Response:
        """Delete a form and its submissions."""
        uid = parse_uuid(form_id)
        if not uid or not await form_service.delete_form(db_session, uid):
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        return success_response({"id": str(uid)})

    @get("/{form_id:str}/schema")
    async def get_schema(self, db_session: AsyncSession, form_id: str) -> Response:
        """JSON Schema and empty-form defaults for client-side validation."""
        uid = parse_uuid(form_id)
        form = await form_service.get_form_by_id(db_session, uid) if uid else None
        if not form:
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        fields = parse_fields(form.fields)
        return success_response(
            {
                "schema": submission_json_schema(fields),
                "defaults": default_values(fields),
            }
        )

    @get("/{form_id:str}/responses/export")
    async def export_responses(self, db_session: AsyncSession, form_id: str) -> Response:
        """Every submission of a form as a table, one column per field."""
        uid = parse_uuid(form_id)
        table = await export_service.export_form_responses(db_session, uid) if uid else None
        if not table:
            return error_response(FORM_NOT_FOUND, HTTP_404_NOT_FOUND)

        return success_response(response_table_to_dict(table))

    @get("/{form_id:str}/responses/{submission_id:str}/export")
    async def export_submission(self, db_session: AsyncSession, form_id: str, submission_id: str) -> Response:
        """A single submission as a one-row table."""
        form_uid = parse_uuid(form_id)
        submission_uid = parse_uuid(submission_id)
        table = None
        if form_uid and submission_uid:
            table = await export_service.export_submission(db_session, form_uid, submission_uid)
        if not table:
            return error_response(SUBMISSION_NOT_FOUND, HTTP_404_NOT_FOUND)

        return success_response(response_table_to_dict(table))
