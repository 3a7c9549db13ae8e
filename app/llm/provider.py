"""
LLM provider interface used by the analysis provider.

Implementations translate their SDK failures into TimeoutError / RuntimeError
so callers never import a vendor exception type.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field


@dataclass
class LLMResponse:
    """One completed model call."""
    content: str
    tokens_in: int = 0
    tokens_out: int = 0
    model: str = ""
    cost_estimate: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.tokens_in + self.tokens_out


class LLMProvider(ABC):

    @abstractmethod
    def chat(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        **kwargs
    ) -> LLMResponse:
        """
        Run a single chat completion.

        Args:
            messages: Role/content dicts, system prompt first
            model: Model identifier chosen by app.llm.router
            json_mode: Constrain the reply to one JSON object

        Raises:
            TimeoutError: No answer within the provider timeout
            RuntimeError: Any other provider-side failure
        """

    def estimate_cost(self, tokens_in: int, tokens_out: int, model: str) -> float:
        return 0.0
