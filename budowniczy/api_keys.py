"""
Settings and credential management for the generation service.

Reads configuration exclusively from environment variables (optionally via .env).
Credentials are never exposed in full via the API; only masked versions are returned.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env"))


PROVIDERS = {
    "generation": {"env_var": "BUDOWNICZY_GENERATION_KEY", "label": "Generation endpoint"},
    "openai": {"env_var": "OPENAI_API_KEY", "label": "OpenAI"},
    "gemini": {"env_var": "GEMINI_API_KEY", "label": "Google Gemini"},
}

DEFAULT_TIMEOUT_S = 30.0


class ApiKeyStatus(BaseModel):
    provider: str
    label: str
    configured: bool
    masked_key: Optional[str] = None


@dataclass(frozen=True)
class GenerationSettings:
    """Remote generation endpoint configuration.

    Both base_url and api_key must be set for the gateway to attempt a
    remote call; otherwise it goes straight to the offline document.
    """
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_s: float = DEFAULT_TIMEOUT_S

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url) and bool(self.api_key)

    @property
    def endpoint(self) -> str:
        base = (self.base_url or "").rstrip("/")
        return f"{base}/functions/v1/analyze-needs"


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_S
    return value if value > 0 else DEFAULT_TIMEOUT_S


class ApiKeysManager:

    def get_key(self, provider: str) -> Optional[str]:
        """Get credential for a provider from environment variables."""
        env_var = PROVIDERS.get(provider, {}).get("env_var")
        if env_var:
            return os.getenv(env_var) or None
        return None

    def get_generation_settings(self) -> GenerationSettings:
        """Snapshot the remote generation settings from the environment."""
        return GenerationSettings(
            base_url=os.getenv("BUDOWNICZY_GENERATION_URL") or None,
            api_key=self.get_key("generation"),
            timeout_s=_parse_timeout(os.getenv("BUDOWNICZY_GENERATION_TIMEOUT")),
        )

    def get_status(self) -> list[ApiKeyStatus]:
        """Get masked status for all providers."""
        result = []
        for provider, meta in PROVIDERS.items():
            key = self.get_key(provider)
            masked = None
            if key and len(key) > 8:
                masked = f"{key[:4]}...{key[-4:]}"
            elif key:
                masked = "***"
            result.append(ApiKeyStatus(
                provider=provider,
                label=meta["label"],
                configured=key is not None and len(key or "") > 0,
                masked_key=masked,
            ))
        return result

    def get_configured_providers(self) -> list[str]:
        """Return list of provider names that have keys configured."""
        return [s.provider for s in self.get_status() if s.configured]


api_keys_manager = ApiKeysManager()
