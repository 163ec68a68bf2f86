"""Field catalogue loader and alias resolution for case payloads."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError


class PropertyKind(str, Enum):
    TITLE = "title"
    SELECT = "select"
    RICH_TEXT = "rich_text"
    MULTI_SELECT = "multi_select"
    NUMBER = "number"
    DATE = "date"
    PEOPLE = "people"


class FieldSpec(BaseModel):
    """One column of the target database and the request keys that feed it."""

    canonical: str = Field(min_length=1)
    aliases: List[str] = Field(default_factory=list)
    kind: PropertyKind
    default: str | None = None
    default_now: bool = False
    accept_input: bool = True

    @property
    def keys(self) -> List[str]:
        """Request keys in priority order (canonical first)."""
        return [self.canonical, *self.aliases]

    @property
    def label(self) -> str:
        return "/".join([*self.aliases[:1], self.canonical])


class FieldCatalogueError(RuntimeError):
    """Raised when the field catalogue cannot be loaded."""


class FieldCatalogue:
    """Ordered collection of :class:`FieldSpec` entries."""

    def __init__(self, specs: List[FieldSpec]):
        self._specs = list(specs)
        self._by_name: Dict[str, FieldSpec] = {spec.canonical: spec for spec in self._specs}

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._specs)

    def __contains__(self, canonical: object) -> bool:
        return canonical in self._by_name

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, canonical: str) -> FieldSpec:
        if canonical not in self._by_name:
            raise KeyError(f"field {canonical} is not in the catalogue")
        return self._by_name[canonical]

    def resolve(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        """Map request keys onto canonical names.

        For each field the canonical key is tried first, then the aliases in
        declared order; the first key holding a non-null value wins. Fields
        that do not accept input are always resolved to ``None``.
        """

        resolved: Dict[str, Any] = {}
        for spec in self._specs:
            value = None
            if spec.accept_input:
                for key in spec.keys:
                    if body.get(key) is not None:
                        value = body[key]
                        break
            resolved[spec.canonical] = value
        return resolved

    def unrequirable(self, names: List[str]) -> List[str]:
        """Return the entries of ``names`` that can never be required.

        Unknown names, people fields and fields that ignore request input can
        never be satisfied by a submission.
        """

        problems: List[str] = []
        for name in names:
            spec = self._by_name.get(name)
            if spec is None:
                problems.append(f"{name} (unknown field)")
            elif spec.kind is PropertyKind.PEOPLE:
                problems.append(f"{name} (people fields are never sent)")
            elif not spec.accept_input:
                problems.append(f"{name} (does not accept request input)")
        return problems


@lru_cache(maxsize=4)
def load_field_catalogue(path: Path) -> FieldCatalogue:
    path = Path(path)
    if not path.exists():
        raise FieldCatalogueError(f"field catalogue missing at {path}")

    with path.open("r", encoding="utf-8") as handle:
        raw_entries = yaml.safe_load(handle) or []

    if not isinstance(raw_entries, list):
        raise FieldCatalogueError(f"field catalogue at {path} must be a list")

    specs: List[FieldSpec] = []
    seen_keys: Dict[str, str] = {}
    errors: List[str] = []

    for idx, raw in enumerate(raw_entries):
        try:
            spec = FieldSpec.model_validate(raw)
        except ValidationError as exc:
            errors.append(f"entry[{idx}] invalid: {exc}")
            continue

        clashes = [key for key in spec.keys if key in seen_keys]
        if clashes:
            errors.append(f"entry[{idx}] reuses keys {clashes}")
            continue

        for key in spec.keys:
            seen_keys[key] = spec.canonical
        specs.append(spec)

    if errors:
        raise FieldCatalogueError("; ".join(errors))

    titles = [spec for spec in specs if spec.kind is PropertyKind.TITLE]
    if len(titles) != 1:
        raise FieldCatalogueError(f"field catalogue must declare exactly one title field, found {len(titles)}")

    return FieldCatalogue(specs)


__all__ = [
    "FieldCatalogue",
    "FieldCatalogueError",
    "FieldSpec",
    "PropertyKind",
    "load_field_catalogue",
]
