"""
Unit Tests for Base Service.

Tests the common patterns provided by BaseService.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from notekeep.backend.core.exceptions import NotFoundError, RemoteError, ValidationError
from notekeep.backend.services.base import BaseService


class _Strict(BaseModel):
    count: int


@pytest.fixture
def service() -> BaseService:
    return BaseService(MagicMock())


class TestRun:
    @pytest.mark.asyncio
    async def test_success_is_wrapped(self, service):
        async def work():
            return 42

        result = await service._run("answer", work())

        assert result.success
        assert result.data == 42
        assert result.metadata.operation == "answer"

    @pytest.mark.asyncio
    async def test_application_error_is_wrapped(self, service):
        async def work():
            raise NotFoundError("gone")

        result = await service._run("find", work())

        assert not result.success
        assert result.error_code == "RES_NOT_FOUND"
        assert result.error.message == "gone"

    @pytest.mark.asyncio
    async def test_validation_details_are_kept(self, service):
        async def work():
            raise ValidationError("bad", details={"title": "required"})

        result = await service._run("check", work())

        assert result.error.details == {"title": "required"}

    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self, service):
        async def work():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await service._run("bug", work())

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, service):
        async def work():
            raise asyncio.CancelledError

        with pytest.raises(asyncio.CancelledError):
            await service._run("cancelled", work())


class TestExecuteRemoteOperation:
    @pytest.mark.asyncio
    async def test_malformed_record_becomes_remote_error(self, service):
        async def parse():
            return _Strict.model_validate({"count": "many"})

        with pytest.raises(RemoteError, match="Malformed record"):
            await service._execute_remote_operation("parse", parse())


class TestValidateRequired:
    def test_all_present(self, service):
        service._validate_required({"title": "t", "content": "c"}, ["title", "content"])

    def test_blank_counts_as_missing(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._validate_required({"title": " ", "content": None}, ["title", "content"])
        assert exc_info.value.details == {"missing_fields": ["title", "content"]}

    def test_custom_message(self, service):
        with pytest.raises(ValidationError, match="Please fill in"):
            service._validate_required({}, ["title"], message="Please fill in both title and content")


class TestValidateStringLength:
    def test_within_bounds(self, service):
        service._validate_string_length("abcdef", "password", min_length=6, max_length=10)

    def test_too_short(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._validate_string_length("abc", "password", min_length=6)
        assert exc_info.value.message == "password too short"

    def test_too_long_with_message(self, service):
        with pytest.raises(ValidationError, match="Way too long"):
            service._validate_string_length("x" * 11, "title", max_length=10, message="Way too long")
