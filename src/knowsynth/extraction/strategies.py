"""Extraction strategies tried in order until each section is filled."""

from __future__ import annotations

import json
import re
from typing import Any, Protocol, Sequence

from knowsynth.extraction.schema import ExtractionSchema, Section, SectionKind, normalize_key, split_items

_FENCE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)
_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+")
_BARE_HEADING = re.compile(r"^(?:#+\s*)?\**[A-Za-z][\w &/()'-]{0,60}\**\s*:\**\s*$|^#+\s+\S")


class _NotJson:
    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return "NOT_JSON"


NOT_JSON: Any = _NotJson()


def strip_code_fences(raw: str) -> str:
    """Return the body of the first markdown code fence, or the stripped text."""

    cleaned = raw.strip()
    match = _FENCE.search(cleaned)
    if match:
        return match.group(1).strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


# Prose allowed around a literal recovered from the middle of a response.
_LEAD_IN_MAX = 120
_LEAD_IN_ENDINGS = (":", ".", "!")


def _is_lead_in(prefix: str) -> bool:
    return not prefix or (
        "\n" not in prefix and len(prefix) <= _LEAD_IN_MAX and prefix.endswith(_LEAD_IN_ENDINGS)
    )


def _is_sign_off(suffix: str) -> bool:
    return not suffix or ("\n" not in suffix and len(suffix) <= _LEAD_IN_MAX)


def _is_structured(value: Any) -> bool:
    if isinstance(value, dict):
        return bool(value)
    return isinstance(value, list) and all(isinstance(item, (dict, str)) for item in value)


def parse_json_literal(raw: str) -> Any:
    """Parse ``raw`` as one JSON object or array, tolerating fences and a short lead-in.

    A literal found inside prose is only accepted when it is the body of the
    response: at most a one-line lead-in before it and a one-line sign-off
    after it, holding records or strings. Bracketed citations such as ``[3]``
    are not literals. Returns ``NOT_JSON`` when no literal can be recovered.
    """

    cleaned = strip_code_fences(raw)
    if not cleaned:
        return NOT_JSON
    try:
        value = json.loads(cleaned)
    except json.JSONDecodeError:
        value = NOT_JSON
    if isinstance(value, (dict, list)):
        return value
    starts = [index for index in (cleaned.find("{"), cleaned.find("[")) if index >= 0]
    if not starts:
        return NOT_JSON
    start = min(starts)
    closer = "}" if cleaned[start] == "{" else "]"
    end = cleaned.rfind(closer)
    if end <= start:
        return NOT_JSON
    if not (_is_lead_in(cleaned[:start].strip()) and _is_sign_off(cleaned[end + 1 :].strip())):
        return NOT_JSON
    try:
        value = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError:
        return NOT_JSON
    return value if _is_structured(value) else NOT_JSON


class ExtractionStrategy(Protocol):
    """A total extraction step: fills whichever sections it can, never raises on bad text."""

    name: str

    def extract(self, text: str, sections: Sequence[Section], schema: ExtractionSchema) -> dict[str, Any]:
        """Return conformant values keyed by section key for the sections it could fill."""


class JsonLiteralStrategy:
    """Use the response directly when it is a JSON literal of the expected shape."""

    name = "json"

    def extract(self, text: str, sections: Sequence[Section], schema: ExtractionSchema) -> dict[str, Any]:
        parsed = parse_json_literal(text)
        if parsed is NOT_JSON:
            return {}
        filled: dict[str, Any] = {}
        if isinstance(parsed, dict):
            by_key = {normalize_key(str(key)): value for key, value in parsed.items()}
            matched_any = any(
                normalize_key(candidate) in by_key
                for section in schema.sections
                for candidate in (section.key, *section.aliases)
            )
            for section in sections:
                candidates = [section.key, *section.aliases]
                for candidate in candidates:
                    value = by_key.get(normalize_key(candidate))
                    coerced = section.coerce(value)
                    if coerced is not None:
                        filled[section.key] = coerced
                        break
            if not matched_any and len(schema.sections) == 1 and schema.sections[0].kind is SectionKind.RECORDS:
                only = schema.sections[0]
                if only in sections:
                    filled[only.key] = [dict(parsed)]
            return filled
        # a bare array only fits a schema with exactly one list-shaped section
        list_sections = schema.list_sections
        if len(list_sections) == 1 and list_sections[0] in sections:
            coerced = list_sections[0].coerce(parsed)
            if coerced is not None:
                filled[list_sections[0].key] = coerced
        return filled


class HeadingStrategy:
    """Find ``"<label>:"`` / ``"<label> -"`` headings and read the line or list after them."""

    name = "heading"

    def extract(self, text: str, sections: Sequence[Section], schema: ExtractionSchema) -> dict[str, Any]:
        lines = text.splitlines()
        filled: dict[str, Any] = {}
        for section in sections:
            found = self._find(section, lines)
            if found is not None:
                filled[section.key] = found
        return filled

    def _find(self, section: Section, lines: list[str]) -> Any | None:
        empty_match: Any | None = None
        for label in section.labels:
            pattern = _heading_pattern(label)
            for index, line in enumerate(lines):
                match = pattern.match(line)
                if not match:
                    continue
                value = self._value(section, match.group(1), lines, index + 1)
                if value:
                    return value
                if empty_match is None:
                    empty_match = value
        return empty_match

    def _value(self, section: Section, remainder: str, lines: list[str], start: int) -> Any:
        remainder = remainder.strip().strip("*_").strip()
        if remainder:
            if section.kind is SectionKind.TEXT:
                return remainder
            items = split_items(remainder)
        else:
            items, paragraph = _block_after(lines, start)
            if section.kind is SectionKind.TEXT:
                return "\n".join(items) if items else " ".join(paragraph)
            if not items and paragraph:
                items = split_items(" ".join(paragraph))
        if section.kind is SectionKind.RECORDS:
            return [section.to_record(item) for item in items]
        return items


def _heading_pattern(label: str) -> re.Pattern[str]:
    words = label.split()
    if words and words[-1].endswith("s") and len(words[-1]) > 3:
        words[-1] = words[-1][:-1]
    body = r"[ \t_]+".join(re.escape(word) for word in words)
    return re.compile(
        rf"^[ \t>#*\-•\d.)]*\**[ \t]*{body}s?[ \t]*\**[ \t]*(?::|[ \t][-–—])\**[ \t]*(.*)$",
        re.IGNORECASE,
    )


def _block_after(lines: list[str], start: int) -> tuple[list[str], list[str]]:
    items: list[str] = []
    paragraph: list[str] = []
    for line in lines[start:]:
        stripped = line.strip()
        if not stripped:
            if items or paragraph:
                break
            continue
        bullet = _BULLET.match(line)
        if bullet:
            if paragraph:
                break
            item = line[bullet.end() :].strip().strip("*_").strip()
            if item:
                items.append(item)
            continue
        if _BARE_HEADING.match(stripped):
            break
        if items:
            if line[:1] in (" ", "\t"):
                items[-1] = f"{items[-1]} {stripped}"
                continue
            break
        paragraph.append(stripped)
    return items, paragraph


def _is_json_literal(text: str) -> bool:
    cleaned = strip_code_fences(text)
    return cleaned.startswith(("{", "[")) and parse_json_literal(cleaned) is not NOT_JSON


class FreeTextStrategy:
    """Derive values from the whole response for sections that declare how.

    Skipped when the response is itself a JSON literal: sections that literal
    left out stay empty rather than absorbing the raw JSON text.
    """

    name = "free_text"

    def extract(self, text: str, sections: Sequence[Section], schema: ExtractionSchema) -> dict[str, Any]:
        filled: dict[str, Any] = {}
        if not text.strip() or _is_json_literal(text):
            return filled
        for section in sections:
            if section.text_parser is not None:
                coerced = section.coerce(section.text_parser(text))
                if coerced is not None:
                    filled[section.key] = coerced
            elif section.keep_full_text:
                filled[section.key] = section.coerce(text)
        return filled


class ZeroValueStrategy:
    """Fill every remaining section with its zero value."""

    name = "zero"

    def extract(self, text: str, sections: Sequence[Section], schema: ExtractionSchema) -> dict[str, Any]:
        return {section.key: section.zero_value() for section in sections}


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    JsonLiteralStrategy(),
    HeadingStrategy(),
    FreeTextStrategy(),
    ZeroValueStrategy(),
)


__all__ = [
    "DEFAULT_STRATEGIES",
    "ExtractionStrategy",
    "FreeTextStrategy",
    "HeadingStrategy",
    "JsonLiteralStrategy",
    "NOT_JSON",
    "ZeroValueStrategy",
    "parse_json_literal",
    "strip_code_fences",
]
