"""Tests for the submission service module."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from formforge.db.models import Submission
from formforge.db.services.submission_service import (
    create_submission,
    get_submission_with_form,
    list_submissions,
)
from formforge.fields import SubmissionValidationError
from formforge.lib.hooks import hooks


@pytest.fixture
def mock_form():
    form = MagicMock()
    form.id = uuid4()
    form.fields = [
        {"id": "name", "type": "text", "required": True},
        {"id": "age", "type": "number", "settings": {"min": 0}},
    ]
    return form


@pytest.fixture
def session_with_form(mock_db_session, mock_form):
    result = MagicMock()
    result.scalar_one_or_none.return_value = mock_form
    mock_db_session.execute = AsyncMock(return_value=result)
    return mock_db_session


class TestCreateSubmission:
    @pytest.mark.asyncio
    async def test_returns_none_for_unknown_form(self, mock_db_session):
        assert await create_submission(mock_db_session, uuid4(), {"name": "Ada"}) is None
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_stores_cleaned_data(self, session_with_form, mock_form):
        submission = await create_submission(
            session_with_form, mock_form.id, {"name": "Ada", "age": "36", "junk": "x"}, ip_address="10.0.0.1"
        )

        assert isinstance(submission, Submission)
        assert submission.form_id == mock_form.id
        assert submission.data == {"name": "Ada", "age": 36.0}
        assert submission.ip_address == "10.0.0.1"
        session_with_form.commit.assert_awaited_once()
        session_with_form.refresh.assert_awaited_once_with(submission)

    @pytest.mark.asyncio
    async def test_invalid_data_raises(self, session_with_form, mock_form):
        with pytest.raises(SubmissionValidationError) as exc_info:
            await create_submission(session_with_form, mock_form.id, {"age": -1})

        assert exc_info.value.errors == {"name": "This field is required", "age": "Must be at least 0"}
        session_with_form.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_required_answer_uses_field_id(self, session_with_form, mock_form):
        with pytest.raises(SubmissionValidationError) as exc_info:
            await create_submission(session_with_form, mock_form.id, {"age": 3})

        assert exc_info.value.errors == {"name": "This field is required"}

    @pytest.mark.asyncio
    async def test_applies_submission_data_filter(self, session_with_form, mock_form, clean_hooks):
        hooks.add_filter("submission_data", lambda data, form: {**data, "name": data["name"].upper()})

        submission = await create_submission(session_with_form, mock_form.id, {"name": "ada"})

        assert submission.data == {"name": "ADA"}

    @pytest.mark.asyncio
    async def test_fires_after_create_action(self, session_with_form, mock_form, clean_hooks):
        seen = []
        hooks.add_action("after_submission_create", lambda submission, form: seen.append((submission, form)))

        submission = await create_submission(session_with_form, mock_form.id, {"name": "Ada"})

        assert seen == [(submission, mock_form)]

    @pytest.mark.asyncio
    async def test_form_deleted_during_insert(self, session_with_form, mock_form):
        session_with_form.commit = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("fk")))

        assert await create_submission(session_with_form, mock_form.id, {"name": "Ada"}) is None
        session_with_form.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_runs_inside_span(self, session_with_form, mock_form, recorded_spans):
        await create_submission(session_with_form, mock_form.id, {"name": "Ada"})

        assert recorded_spans[0] == ("submission.create", {"form_id": str(mock_form.id)})


class TestListSubmissions:
    @pytest.mark.asyncio
    async def test_returns_page(self, mock_db_session):
        items = [MagicMock(), MagicMock()]
        scalars = MagicMock()
        scalars.all.return_value = items
        page_result = MagicMock()
        page_result.scalars.return_value = scalars
        count_result = MagicMock()
        count_result.scalar_one.return_value = 7
        mock_db_session.execute = AsyncMock(side_effect=[page_result, count_result])

        page = await list_submissions(mock_db_session, uuid4(), limit=2, offset=4)

        assert page.items == items
        assert page.total == 7
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_empty_for_unknown_form(self, mock_db_session):
        page = await list_submissions(mock_db_session, uuid4())

        assert page.items == []
        assert page.total == 0
        assert page.limit == 50
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_orders_most_recent_first(self, mock_db_session):
        await list_submissions(mock_db_session, uuid4(), limit=5, offset=0)

        query = mock_db_session.execute.call_args_list[0][0][0]
        assert "ORDER BY submissions.submitted_at DESC" in str(query)
        assert query._limit == 5


class TestGetSubmissionWithForm:
    @pytest.mark.asyncio
    async def test_found(self, mock_db_session):
        submission = MagicMock()
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = submission

        assert await get_submission_with_form(mock_db_session, uuid4()) is submission

    @pytest.mark.asyncio
    async def test_missing(self, mock_db_session):
        assert await get_submission_with_form(mock_db_session, uuid4()) is None
