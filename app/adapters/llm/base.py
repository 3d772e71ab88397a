from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
    """Chat model that answers with a single JSON object."""

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send ``prompt`` and return the decoded object.

        ``kwargs`` carries sampling options such as ``temperature`` or
        ``max_tokens``. Implementations raise ``LLMAppError`` when the call
        fails or the answer is not a JSON object.
        """
        ...
