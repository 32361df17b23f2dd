"""Coerce free-form generated text into schema-conformant records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from knowsynth.extraction.schema import ExtractionSchema, SchemaLike, as_schema
from knowsynth.extraction.strategies import DEFAULT_STRATEGIES, ExtractionStrategy, JsonLiteralStrategy
from knowsynth.metrics.observability import PipelineMetrics, get_logger


@dataclass(frozen=True)
class ParseDegradation:
    """Recorded fact that a section was not filled from a structured literal."""

    section: str
    strategy: str
    reason: str


@dataclass(frozen=True)
class ExtractionResult:
    values: dict[str, Any]
    strategies: Mapping[str, str]
    degradations: tuple[ParseDegradation, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.degradations)

    def strategy_for(self, key: str) -> str:
        return self.strategies[key]


class StructuredExtractor:
    """Run an ordered chain of extraction strategies over a response text.

    Each strategy sees only the sections that earlier strategies left empty, so
    the first strategy able to fill a section wins. The last link is always a
    zero-value fill, which makes ``extract`` total: the returned record has the
    schema's exact key set, with values of the declared shape.
    """

    def __init__(self, strategies: Sequence[ExtractionStrategy] | None = None) -> None:
        self._strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES
        self._logger = get_logger("extraction")

    def extract(self, raw_text: str, schema: SchemaLike) -> dict[str, Any]:
        return self.extract_with_report(raw_text, schema).values

    def extract_with_report(self, raw_text: str, schema: SchemaLike) -> ExtractionResult:
        if not isinstance(raw_text, str):
            raise TypeError(f"raw_text must be a string, not {type(raw_text).__name__}")
        resolved: ExtractionSchema = as_schema(schema)
        values: dict[str, Any] = {}
        strategies: dict[str, str] = {}
        for strategy in self._strategies:
            remaining = [section for section in resolved.sections if section.key not in values]
            if not remaining:
                break
            try:
                produced = strategy.extract(raw_text, remaining, resolved)
            except Exception as exc:
                self._logger.warning("extraction.strategy_failed", strategy=strategy.name, error=str(exc))
                continue
            for section in remaining:
                if section.key not in produced:
                    continue
                coerced = section.coerce(produced[section.key])
                if coerced is None:
                    continue
                values[section.key] = coerced
                strategies[section.key] = strategy.name

        degradations: list[ParseDegradation] = []
        record: dict[str, Any] = {}
        for section in resolved.sections:
            if section.key not in values:
                values[section.key] = section.zero_value()
                strategies[section.key] = "zero"
            record[section.key] = values[section.key]
            strategy_name = strategies[section.key]
            PipelineMetrics.observe_extraction(strategy_name)
            if strategy_name != JsonLiteralStrategy.name:
                degradations.append(
                    ParseDegradation(
                        section=section.key,
                        strategy=strategy_name,
                        reason="no structured literal for section",
                    )
                )
        if degradations:
            self._logger.info(
                "extraction.degraded",
                sections=[item.section for item in degradations],
                strategies=[item.strategy for item in degradations],
            )
        return ExtractionResult(values=record, strategies=strategies, degradations=tuple(degradations))


__all__ = ["ExtractionResult", "ParseDegradation", "StructuredExtractor"]
