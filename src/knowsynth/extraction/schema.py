"""Section schemas describing the shape of an extracted record."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Union

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NONE_VALUE = re.compile(
    r"^(?:none(?:\s+(?:found|identified|mentioned|noted))?|n/?a|nil|nothing|-+|"
    r"no\s+[\w ]+?\s+(?:found|identified|mentioned|noted))\.?$",
    re.IGNORECASE,
)
_INLINE_SPLIT = re.compile(r"\s*•\s*|\s+[-*]\s+|(?:^|\s)\d+[.)]\s+")


class SectionKind(str, Enum):
    """Declared shape of a section value."""

    TEXT = "text"
    LIST = "list"
    RECORDS = "records"


def humanize_key(key: str) -> str:
    """``actionItems`` / ``action_items`` -> ``action items``."""

    spaced = _CAMEL_BOUNDARY.sub(" ", key).replace("_", " ").replace("-", " ")
    return " ".join(spaced.lower().split())


def normalize_key(key: str) -> str:
    return re.sub(r"[^a-z0-9]", "", key.lower())


def is_none_value(text: str) -> bool:
    return bool(_NONE_VALUE.match(text.strip().strip("*_ ")))


def split_items(text: str) -> list[str]:
    """Split a single line of items on bullet markers, falling back to commas."""

    if is_none_value(text):
        return []
    parts = [part.strip(" \t,;*_") for part in _INLINE_SPLIT.split(text)]
    parts = [part for part in parts if part]
    if len(parts) <= 1:
        parts = [part.strip(" \t*_") for part in re.split(r"[,;]", text)]
        parts = [part for part in parts if part]
    return [part for part in parts if not is_none_value(part)]


@dataclass(frozen=True)
class Section:
    """One expected top-level key of an extracted record."""

    key: str
    kind: SectionKind = SectionKind.LIST
    aliases: tuple[str, ...] = ()
    record_key: str = "name"
    record_factory: Callable[[str], dict[str, Any]] | None = None
    text_parser: Callable[[str], Any] | None = None
    keep_full_text: bool = False

    @property
    def labels(self) -> tuple[str, ...]:
        seen: list[str] = []
        for label in (humanize_key(self.key), *(humanize_key(alias) for alias in self.aliases)):
            if label and label not in seen:
                seen.append(label)
        return tuple(seen)

    @property
    def is_list(self) -> bool:
        return self.kind in (SectionKind.LIST, SectionKind.RECORDS)

    def zero_value(self) -> Any:
        if self.kind is SectionKind.TEXT:
            return ""
        return []

    def to_record(self, item: str) -> dict[str, Any]:
        if self.record_factory is not None:
            return dict(self.record_factory(item))
        return {self.record_key: item}

    def coerce(self, value: Any) -> Any | None:
        """Return ``value`` in this section's shape, or ``None`` when it cannot conform."""

        if value is None:
            return None
        if self.kind is SectionKind.TEXT:
            if isinstance(value, str):
                return value.strip()
            if isinstance(value, (bool, int, float)):
                return str(value)
            if isinstance(value, list):
                return "\n".join(_stringify(item) for item in value if item is not None)
            if isinstance(value, dict):
                return json.dumps(value, ensure_ascii=False)
            return None
        if self.kind is SectionKind.LIST:
            if isinstance(value, str):
                return split_items(value)
            if isinstance(value, list):
                return [_stringify(item) for item in value if item is not None and _stringify(item)]
            return None
        # records
        if isinstance(value, dict):
            return [dict(value)]
        if isinstance(value, str):
            return [self.to_record(item) for item in split_items(value)]
        if isinstance(value, list):
            records: list[dict[str, Any]] = []
            for item in value:
                if isinstance(item, dict):
                    records.append(dict(item))
                elif item is not None and _stringify(item):
                    records.append(self.to_record(_stringify(item)))
            return records
        return None


def _stringify(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, (dict, list)):
        return json.dumps(item, ensure_ascii=False)
    return str(item)


@dataclass(frozen=True)
class ExtractionSchema:
    """Ordered collection of expected sections."""

    sections: tuple[Section, ...]

    def __post_init__(self) -> None:
        keys = [section.key for section in self.sections]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate section keys in schema: {keys}")

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(section.key for section in self.sections)

    @property
    def list_sections(self) -> tuple[Section, ...]:
        return tuple(section for section in self.sections if section.is_list)

    def zero_record(self) -> dict[str, Any]:
        return {section.key: section.zero_value() for section in self.sections}

    @classmethod
    def of(cls, *sections: Section) -> "ExtractionSchema":
        return cls(sections=tuple(sections))


SchemaLike = Union[ExtractionSchema, Mapping[str, Union[str, SectionKind, Section]], Iterable[Section]]


def as_schema(schema: SchemaLike) -> ExtractionSchema:
    """Accept an ``ExtractionSchema``, sections, or a ``{key: kind}`` mapping."""

    if isinstance(schema, ExtractionSchema):
        return schema
    if isinstance(schema, Mapping):
        sections: list[Section] = []
        for key, spec in schema.items():
            if isinstance(spec, Section):
                sections.append(spec)
            else:
                sections.append(Section(key=key, kind=SectionKind(spec)))
        return ExtractionSchema(sections=tuple(sections))
    return ExtractionSchema(sections=tuple(schema))


__all__ = [
    "ExtractionSchema",
    "SchemaLike",
    "Section",
    "SectionKind",
    "as_schema",
    "humanize_key",
    "is_none_value",
    "normalize_key",
    "split_items",
]
