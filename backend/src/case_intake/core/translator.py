"""Case submission pipeline: normalise, validate, build, create."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Tuple

import structlog

from ..adapters.notion import RecordCreator, RecordRef
from .config import ConfigurationError, Settings, SettingsError
from .fields import FieldCatalogue, PropertyKind, load_field_catalogue
from .metrics import mask_identifier
from .normalize import safe_str
from .properties import build_properties
from .validation import InvalidBodyError, validate_required

logger = structlog.get_logger(__name__)

INVALID_DATABASE_ID_HINT = "Use the Notion database UUID (32 hex), not a URL."


@dataclass(frozen=True)
class CaseSubmissionResult:
    record: RecordRef
    case_id: str


class CaseTranslator:
    """Turns one inbound case payload into one Notion page."""

    def __init__(
        self,
        settings: Settings,
        creator: RecordCreator,
        *,
        catalogue: FieldCatalogue | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings
        self.creator = creator
        self.catalogue = catalogue or load_field_catalogue(settings.fields_path)
        problems = self.catalogue.unrequirable(settings.required_fields)
        if problems:
            raise SettingsError(f"required_fields cannot require: {', '.join(problems)}")
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _check_configuration(self) -> str:
        if not self.settings.notion_token:
            raise ConfigurationError("Missing env: NOTION_TOKEN")
        if not self.settings.notion_database_id:
            raise ConfigurationError("Missing env: NOTION_DATABASE_ID")

        database_id = self.settings.database_id
        if database_id is None:
            raise ConfigurationError(
                "Invalid env: NOTION_DATABASE_ID",
                message=INVALID_DATABASE_ID_HINT,
                value_seen=self.settings.notion_database_id,
            )
        return database_id

    def title_field(self) -> str:
        return next(spec.canonical for spec in self.catalogue if spec.kind is PropertyKind.TITLE)

    def prepare(self, body: Any) -> Tuple[Dict[str, Dict[str, Any]], str]:
        """Validate ``body`` and return the property set plus the case id."""

        if not isinstance(body, dict):
            raise InvalidBodyError("request body must be a JSON object")

        resolved = self.catalogue.resolve(body)
        validate_required(
            resolved,
            body,
            catalogue=self.catalogue,
            required_fields=self.settings.required_fields,
        )

        properties = build_properties(resolved, catalogue=self.catalogue, now=self._clock())
        case_id = safe_str(resolved.get(self.title_field())).strip()
        return properties, case_id

    async def submit(self, body: Any) -> CaseSubmissionResult:
        database_id = self._check_configuration()
        properties, case_id = self.prepare(body)

        log = logger.bind(case_id=mask_identifier(case_id), properties=sorted(properties))
        log.info("case_submission_received")

        record = await self.creator.create_record(database_id, properties)
        log.info("case_record_created", record_id=record.id)
        return CaseSubmissionResult(record=record, case_id=case_id)


__all__ = ["CaseSubmissionResult", "CaseTranslator", "INVALID_DATABASE_ID_HINT"]
