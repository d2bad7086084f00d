"""Generator test doubles for the workflow engine."""

from typing import Any, Optional

from sashi.core.workflow_models import GenerationContext
from sashi.runtime.generation import Generator


class StaticGenerator(Generator):
    """Returns canned outputs and records every call.

    ``generated`` maps prompt -> output for ``generate``; ``transformed`` maps
    prompt -> output for ``transform``. Unknown prompts echo the prompt back.
    """

    def __init__(
        self,
        generated: Optional[dict[str, Any]] = None,
        transformed: Optional[dict[str, Any]] = None,
        error: Optional[Exception] = None,
    ):
        self.generated = generated or {}
        self.transformed = transformed or {}
        self.error = error
        self.calls: list[tuple[str, Any, GenerationContext]] = []

    async def generate(self, prompt: str, context: GenerationContext) -> Any:
        self.calls.append(("generate", prompt, context))
        if self.error is not None:
            raise self.error
        return self.generated.get(prompt, prompt)

    async def transform(self, raw_result: Any, prompt: str, context: GenerationContext) -> Any:
        self.calls.append(("transform", raw_result, context))
        if self.error is not None:
            raise self.error
        return self.transformed.get(prompt, raw_result)
