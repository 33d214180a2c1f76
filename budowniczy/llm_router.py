"""LLM Router for the analyze-needs generation service.

The model prefix picks the provider:
  - gpt-*    → OpenAI Responses API
  - gemini-* → Google GenAI SDK

Provider functions only turn a prompt into text. Key checks, timing and error
capture live in llm_call, so failures come back in LLMResult.error and are
never raised.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from budowniczy.api_keys import PROVIDERS, api_keys_manager

logger = logging.getLogger(__name__)

AVAILABLE_MODELS = [
    {"id": "gpt-4o", "label": "GPT-4o", "provider": "openai"},
    {"id": "gpt-4.1", "label": "GPT-4.1", "provider": "openai"},
    {"id": "gemini-2.0-flash", "label": "Gemini 2.0 Flash", "provider": "gemini"},
]

DEFAULT_MODEL = "gpt-4o"


def get_model() -> str:
    return os.getenv("BUDOWNICZY_LLM_MODEL") or DEFAULT_MODEL


def provider_for(model: str) -> str:
    return "openai" if model.startswith("gpt-") else "gemini"


@dataclass
class LLMResult:
    text: str
    duration_s: float = 0.0
    error: Optional[str] = None


def _openai_text(model: str, system_prompt: Optional[str], user_prompt: str,
                 temperature: float, max_output_tokens: Optional[int]) -> str:
    from openai import OpenAI

    kwargs: dict = {"model": model, "input": user_prompt, "temperature": temperature}
    if system_prompt:
        kwargs["instructions"] = system_prompt
    if max_output_tokens:
        kwargs["max_output_tokens"] = max_output_tokens

    client = OpenAI(api_key=api_keys_manager.get_key("openai"))
    return client.responses.create(**kwargs).output_text or ""


def _gemini_text(model: str, system_prompt: Optional[str], user_prompt: str,
                 temperature: float, max_output_tokens: Optional[int]) -> str:
    from google import genai
    from google.genai import types

    client = genai.Client(api_key=api_keys_manager.get_key("gemini"))
    response = client.models.generate_content(
        model=model,
        contents=user_prompt,
        config=types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=temperature,
            max_output_tokens=max_output_tokens or None,
        ),
    )
    return response.text or ""


_PROVIDER_CALLS = {
    "openai": _openai_text,
    "gemini": _gemini_text,
}


def is_configured(model: Optional[str] = None) -> bool:
    """True when the provider behind the model has a key."""
    return api_keys_manager.get_key(provider_for(model or get_model())) is not None


def llm_call(
    user_prompt: str,
    system_prompt: Optional[str] = None,
    model: Optional[str] = None,
    temperature: float = 0.1,
    max_output_tokens: Optional[int] = 3000,
) -> LLMResult:
    """Generate text with the provider behind the model name."""
    model = model or get_model()
    provider = provider_for(model)
    if api_keys_manager.get_key(provider) is None:
        return LLMResult(text="", error=f"{PROVIDERS[provider]['env_var']} not set")

    t0 = time.time()
    try:
        text = _PROVIDER_CALLS[provider](model, system_prompt, user_prompt, temperature, max_output_tokens)
    except Exception as e:
        logger.error(f"{provider} API error ({model}): {e}")
        return LLMResult(text="", error=str(e), duration_s=round(time.time() - t0, 2))
    return LLMResult(text=text, duration_s=round(time.time() - t0, 2))
