"""
OpenAI implementation of the LLM provider.
"""
import logging
from typing import Optional, Dict, List

from openai import OpenAI, APIError, APITimeoutError

from app.core.config import OPENAI_API_KEY, OPENAI_MODEL, ANALYSIS_TIMEOUT_SECONDS
from app.llm.provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

# USD per 1M tokens (input/output)
MODEL_PRICING = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
}

# Full reports with every premium section run long
DEFAULT_MAX_TOKENS = 3000


class OpenAIProvider(LLMProvider):

    def __init__(self, api_key: Optional[str] = None, timeout: float = ANALYSIS_TIMEOUT_SECONDS):
        key = api_key or OPENAI_API_KEY
        if not key:
            raise ValueError("OPENAI_API_KEY not configured")
        # No SDK retries: a failed analysis is resubmitted by the user
        self.client = OpenAI(api_key=key, timeout=timeout, max_retries=0)
        self.timeout = timeout
        logger.info(f"OpenAI provider ready: timeout={timeout}s")

    def chat(
        self,
        messages: List[Dict[str, str]],
        model: str = OPENAI_MODEL,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        **kwargs
    ) -> LLMResponse:
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            completion = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
                **kwargs
            )
        except APITimeoutError as e:
            logger.error(f"OpenAI call timed out: model={model}, timeout={self.timeout}s")
            raise TimeoutError(f"Model call exceeded {self.timeout}s") from e
        except APIError as e:
            logger.error(f"OpenAI call failed: model={model}, error={e}")
            raise RuntimeError(f"Model call failed: {e}") from e

        choice = completion.choices[0]
        usage = completion.usage
        tokens_in = usage.prompt_tokens if usage else 0
        tokens_out = usage.completion_tokens if usage else 0

        return LLMResponse(
            content=choice.message.content or "",
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            model=model,
            cost_estimate=self.estimate_cost(tokens_in, tokens_out, model),
            metadata={"finish_reason": choice.finish_reason},
        )

    def estimate_cost(self, tokens_in: int, tokens_out: int, model: str) -> float:
        pricing = MODEL_PRICING.get(model, MODEL_PRICING["gpt-4o-mini"])
        return (tokens_in * pricing["input"] + tokens_out * pricing["output"]) / 1_000_000
