"""Translate resolved case fields into Notion database properties."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from .fields import FieldCatalogue, FieldSpec, PropertyKind
from .normalize import normalize_list, safe_str, to_number_or_none

# Notion rejects text objects longer than this.
RICH_TEXT_LIMIT = 2000


def iso_instant(moment: datetime) -> str:
    """Format ``moment`` as a UTC ISO-8601 instant with millisecond precision."""

    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _text_objects(content: str) -> List[Dict[str, Any]]:
    return [
        {"text": {"content": content[start : start + RICH_TEXT_LIMIT]}}
        for start in range(0, len(content), RICH_TEXT_LIMIT)
    ]


def _encode(spec: FieldSpec, value: Any, now_iso: str) -> Dict[str, Any] | None:
    kind = spec.kind

    if kind is PropertyKind.PEOPLE:
        return None

    if kind is PropertyKind.NUMBER:
        number = to_number_or_none(value)
        return None if number is None else {"number": number}

    if kind is PropertyKind.MULTI_SELECT:
        names = normalize_list(value)
        if not names and spec.default:
            names = normalize_list(spec.default)
        return {"multi_select": [{"name": name} for name in names]} if names else None

    text = safe_str(value).strip() or (spec.default or "")

    if kind is PropertyKind.DATE:
        start = text or (now_iso if spec.default_now else "")
        return {"date": {"start": start}} if start else None

    if not text:
        return None

    if kind is PropertyKind.TITLE:
        return {"title": _text_objects(text)}
    if kind is PropertyKind.SELECT:
        return {"select": {"name": text}}
    if kind is PropertyKind.RICH_TEXT:
        return {"rich_text": _text_objects(text)}

    raise ValueError(f"unsupported property kind {kind}")


def build_properties(
    resolved: Dict[str, Any],
    *,
    catalogue: FieldCatalogue,
    now: datetime | None = None,
) -> Dict[str, Dict[str, Any]]:
    """Build the Notion ``properties`` payload for one case.

    Fields without a usable value are left out entirely: Notion rejects
    explicit nulls and empty values for most property types. People
    properties are never populated from request data.
    """

    now_iso = iso_instant(now or datetime.now(timezone.utc))
    properties: Dict[str, Dict[str, Any]] = {}

    for spec in catalogue:
        encoded = _encode(spec, resolved.get(spec.canonical), now_iso)
        if encoded is not None:
            properties[spec.canonical] = encoded

    return properties


__all__ = ["RICH_TEXT_LIMIT", "build_properties", "iso_instant"]
