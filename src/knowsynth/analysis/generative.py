"""Single prompt-and-extract calls against the generation backend."""

from __future__ import annotations

from knowsynth.extraction import ExtractionResult, ExtractionSchema, StructuredExtractor
from knowsynth.metrics.observability import get_logger
from knowsynth.services.generation import GenerationBackend, StoreNames, as_store_list, response_text

LOGGER = get_logger("analysis")


class GenerativeAnalyst:
    """Send one prompt scoped to the given store(s) and read back text or a record."""

    def __init__(
        self,
        generator: GenerationBackend,
        extractor: StructuredExtractor | None = None,
        *,
        model: str | None = None,
    ) -> None:
        self._generator = generator
        self._extractor = extractor or StructuredExtractor()
        self._model = model

    @property
    def extractor(self) -> StructuredExtractor:
        return self._extractor

    async def ask_text(self, store_names: StoreNames, prompt: str) -> str:
        stores = as_store_list(store_names)
        response = await self._generator.generate(stores, prompt, (), model=self._model)
        return response_text(response)

    async def ask_structured(
        self,
        store_names: StoreNames,
        prompt: str,
        schema: ExtractionSchema,
        *,
        purpose: str,
    ) -> tuple[ExtractionResult, str]:
        text = await self.ask_text(store_names, prompt)
        result = self._extractor.extract_with_report(text, schema)
        LOGGER.debug(
            "analysis.extracted",
            purpose=purpose,
            strategies=dict(result.strategies),
            text_length=len(text),
        )
        return result, text
