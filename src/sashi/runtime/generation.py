"""Generation and transform hooks.

Actions can ask for a parameter value to be generated (``_generate``) or for
their raw result to be reshaped before it is stored (``_transform``). Both go
through an injected ``Generator`` so the engine never depends on a specific
model vendor. ``LLMGenerator`` is the default implementation, backed by the
``llm`` library.

Model resolution order for ``LLMGenerator``:
1. ``model`` passed to the constructor
2. ``settings.llm.default_model``
3. the ``llm`` library's configured default model
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import llm

from sashi.core.exceptions import GenerationOutputInvalidError
from sashi.core.json_utils import strip_code_fences, try_parse_json
from sashi.core.workflow_models import GenerationContext

logger = logging.getLogger(__name__)


class Generator(ABC):
    """Text/code generation capability injected into the executor."""

    @abstractmethod
    async def generate(self, prompt: str, context: GenerationContext) -> Any:
        """Produce a parameter value for ``prompt``.

        For ``json`` and ``sql`` contexts implementations should return the
        value already in that shape; plain text is parsed best-effort by the
        engine.
        """

    @abstractmethod
    async def transform(self, raw_result: Any, prompt: str, context: GenerationContext) -> Any:
        """Reshape an action's raw result according to ``prompt``."""


def parse_generated_output(output: Any, context: GenerationContext) -> Any:
    """Coerce hook output to the shape its context asks for.

    - json: text has code fences stripped and is decoded; structured values pass
    - sql: text has code fences stripped and must not be empty
    - markdown/general: passed through unchanged

    Raises:
        GenerationOutputInvalidError: Output cannot be brought into shape
    """
    if context == GenerationContext.JSON:
        if not isinstance(output, str):
            return output
        success, parsed = try_parse_json(strip_code_fences(output))
        if not success:
            preview = output.strip()[:80]
            raise GenerationOutputInvalidError(f"Expected JSON output, got: {preview!r}")
        return parsed

    if context == GenerationContext.SQL:
        if not isinstance(output, str):
            raise GenerationOutputInvalidError(f"Expected SQL text, got {type(output).__name__}")
        sql = strip_code_fences(output)
        if not sql:
            raise GenerationOutputInvalidError("Expected SQL text, got an empty response")
        return sql

    return output


_SYSTEM_PROMPTS: dict[GenerationContext, str] = {
    GenerationContext.SQL: (
        "You write a single SQL query that answers the request. Respond with the query only, no explanation."
    ),
    GenerationContext.MARKDOWN: "You write concise, well-formatted Markdown. Respond with the Markdown only.",
    GenerationContext.JSON: "You respond with valid JSON only: no prose, no code fences.",
    GenerationContext.GENERAL: "You respond with the requested text only, without preamble.",
}


class LLMGenerator(Generator):
    """``Generator`` backed by the ``llm`` library.

    Calls are blocking, so they run in a worker thread to keep the event loop
    free while the model responds.
    """

    def __init__(self, model: Optional[str] = None, temperature: Optional[float] = None):
        self.model = model
        self.temperature = temperature

    def _complete(self, prompt: str, context: GenerationContext) -> str:
        model = llm.get_model(self.model) if self.model else llm.get_model()
        kwargs: dict[str, Any] = {"system": _SYSTEM_PROMPTS[context]}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        logger.debug(
            f"Calling model for {context.value} generation",
            extra={"model": self.model or "default", "context": context.value},
        )
        response = model.prompt(prompt, **kwargs)
        return response.text()

    async def generate(self, prompt: str, context: GenerationContext) -> Any:
        text = await asyncio.to_thread(self._complete, prompt, context)
        return parse_generated_output(text, context)

    async def transform(self, raw_result: Any, prompt: str, context: GenerationContext) -> Any:
        try:
            serialized = json.dumps(raw_result, indent=2, default=str)
        except (TypeError, ValueError):
            serialized = str(raw_result)
        full_prompt = f"{prompt}\n\nData:\n{serialized}"
        text = await asyncio.to_thread(self._complete, full_prompt, context)
        return parse_generated_output(text, context)

    @classmethod
    def from_settings(cls, settings: Any) -> "LLMGenerator":
        """Build a generator from ``SashiSettings``."""
        return cls(model=settings.llm.default_model, temperature=settings.llm.temperature)
