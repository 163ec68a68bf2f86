"""Pytest configuration and shared fixtures for case intake tests."""

from typing import Any, Dict, List, Tuple

import pytest

from case_intake.adapters.notion import RecordCreationError, RecordRef
from case_intake.core.config import Settings
from case_intake.core.fields import load_field_catalogue

DATABASE_ID = "2d31c70fce6f80969f7ad4bd1ecd16a4"


class FakeRecordCreator:
    """Records every create call instead of talking to Notion."""

    def __init__(self, ref: RecordRef | None = None, error: Exception | None = None):
        self.ref = ref or RecordRef(id="page-123", url="https://www.notion.so/page-123")
        self.error = error
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def create_record(self, collection_id: str, properties: Dict[str, Any]) -> RecordRef:
        self.calls.append((collection_id, properties))
        if self.error is not None:
            raise self.error
        return self.ref


@pytest.fixture
def settings() -> Settings:
    return Settings(notion_token="secret_test_token", notion_database_id=DATABASE_ID)


@pytest.fixture
def catalogue(settings: Settings):
    return load_field_catalogue(settings.fields_path)


@pytest.fixture
def creator() -> FakeRecordCreator:
    return FakeRecordCreator()


@pytest.fixture
def failing_creator() -> FakeRecordCreator:
    return FakeRecordCreator(
        error=RecordCreationError(
            "Status is expected to be select.",
            code="validation_error",
            status=400,
            body='{"object":"error","status":400,"code":"validation_error"}',
        )
    )


@pytest.fixture
def valid_case() -> Dict[str, Any]:
    return {
        "caseId": "CASE-0042",
        "status": "New",
        "urgency": "High",
        "specialty": "Cardiology",
        "age": "57",
        "gender": "Female",
        "country": "Kenya",
        "chiefComplaint": "  Chest pain on exertion  ",
        "hospitalsShortlist": "Aga Khan, Nairobi Hospital, ",
        "budget": 12000,
    }


@pytest.fixture
def make_creator():
    return FakeRecordCreator
