"""REST endpoints for form submissions."""

from typing import Any

from litestar import Controller, Request, Response, get, post
from litestar.params import Parameter
from litestar.status_codes import HTTP_201_CREATED, HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND
from sqlalchemy.ext.asyncio import AsyncSession

from formforge.controllers.helpers import (
    client_ip,
    get_app_settings,
    parse_pagination,
    parse_uuid,
    submission_to_dict,
)
from formforge.db.services import submission_service
from formforge.lib.responses import error_response, success_response


class SubmissionsController(Controller):
    path = "/api/submissions"

    @post("/")
    async def create_submission(self, request: Request, db_session: AsyncSession, data: dict[str, Any]) -> Response:
        """Validate answers against the form's fields and store them."""
        form_id = data.get("formId")
        answers = data.get("data")
        if not form_id or not isinstance(answers, dict):
            return error_response("Form ID and data are required", HTTP_400_BAD_REQUEST)

        uid = parse_uuid(form_id)
        if not uid:
            return error_response("Form not found", HTTP_404_NOT_FOUND)

        ip_address = data.get("ipAddress")
        if not isinstance(ip_address, str) or not ip_address:
            ip_address = client_ip(request)

        submission = await submission_service.create_submission(
            db_session, uid, answers, ip_address=ip_address[:45] if ip_address else None
        )
        if not submission:
            return error_response("Form not found", HTTP_404_NOT_FOUND)

        return success_response(submission_to_dict(submission), HTTP_201_CREATED)

    @get("/")
    async def list_submissions(
        self,
        request: Request,
        db_session: AsyncSession,
        form_id: str | None = Parameter(query="formId", default=None),
        limit: str | None = None,
        offset: str | None = None,
    ) -> Response:
        """List a form's submissions, most recent first."""
        if not form_id:
            return error_response("Form ID is required", HTTP_400_BAD_REQUEST)

        api = get_app_settings(request).api
        limit_value, offset_value = parse_pagination(limit, offset, api.default_submission_limit, api.max_limit)

        uid = parse_uuid(form_id)
        if not uid:
            return success_response({"submissions": [], "total": 0, "hasMore": False})

        page = await submission_service.list_submissions(db_session, uid, limit=limit_value, offset=offset_value)
        return success_response(
            {
                "submissions": [submission_to_dict(s) for s in page.items],
                "total": page.total,
                "hasMore": page.has_more,
            }
        )

    @get("/{submission_id:str}")
    async def get_submission(self, db_session: AsyncSession, submission_id: str) -> Response:
        """Get one submission together with the form it answers."""
        uid = parse_uuid(submission_id)
        submission = await submission_service.get_submission_with_form(db_session, uid) if uid else None
        if not submission:
            return error_response("Submission not found", HTTP_404_NOT_FOUND)

        return success_response(submission_to_dict(submission, form=submission.form))
