"""Generation Gateway: remote generation with guaranteed offline fallback.

One POST to the configured analyze-needs endpoint, no retries. Every failure
mode (missing configuration, transport error, non-2xx, malformed body, remote
error field) is normalized to the offline document, so callers always receive
a non-empty string.

Wire contract, as served by the analyze-needs function: request
{"surveyData": {what_looking_for, room_type, budget_range, quality_level,
additional_info}}, answer {"response": "<document>"} or {"error": "..."}.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from budowniczy.api_keys import GenerationSettings, api_keys_manager

from .offline import generate_offline_document
from .survey import SurveyAnswers

logger = logging.getLogger(__name__)

SOURCE_ONLINE = "online"
SOURCE_OFFLINE = "offline"


@dataclass
class GenerationResult:
    text: str
    source: str = SOURCE_ONLINE
    duration_s: float = 0.0
    error: Optional[str] = None


class RemoteGenerationError(Exception):
    """Raised internally for any unusable remote answer; never leaves the gateway."""


def _extract_document(response: httpx.Response) -> str:
    if not response.is_success:
        raise RemoteGenerationError(f"HTTP {response.status_code}: {response.text[:200]}")
    try:
        data = response.json()
    except ValueError as e:
        raise RemoteGenerationError(f"malformed JSON body: {e}")
    if not isinstance(data, dict):
        raise RemoteGenerationError(f"unexpected payload type {type(data).__name__}")
    if data.get("error"):
        raise RemoteGenerationError(f"remote error: {data['error']}")
    text = data.get("response")
    if not isinstance(text, str) or not text.strip():
        raise RemoteGenerationError("missing 'response' field")
    return text


class GenerationGateway:
    """Decides between remote and offline generation.

    Settings are read from the environment on each call unless given
    explicitly. The transport hook lets tests substitute httpx.MockTransport.
    """

    def __init__(
        self,
        settings: Optional[GenerationSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    @property
    def settings(self) -> GenerationSettings:
        return self._settings or api_keys_manager.get_generation_settings()

    async def generate(self, answers: SurveyAnswers) -> str:
        result = await self.generate_with_details(answers)
        return result.text

    async def generate_with_details(self, answers: SurveyAnswers) -> GenerationResult:
        settings = self.settings
        if not settings.is_configured:
            logger.info("Generation endpoint not configured, using offline document")
            return self._offline(answers, error="not configured")

        t0 = time.time()
        try:
            async with httpx.AsyncClient(timeout=settings.timeout_s, transport=self._transport) as client:
                response = await client.post(
                    settings.endpoint,
                    json={"surveyData": answers.to_dict()},
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {settings.api_key}",
                    },
                )
            text = _extract_document(response)
        except Exception as e:
            logger.warning(f"Remote generation failed ({settings.endpoint}), switching to offline: {e}")
            return self._offline(answers, error=str(e), t0=t0)

        logger.info(f"Remote generation succeeded in {time.time() - t0:.1f}s")
        return GenerationResult(
            text=text,
            source=SOURCE_ONLINE,
            duration_s=round(time.time() - t0, 2),
        )

    @staticmethod
    def _offline(answers: SurveyAnswers, error: str, t0: Optional[float] = None) -> GenerationResult:
        return GenerationResult(
            text=generate_offline_document(answers),
            source=SOURCE_OFFLINE,
            duration_s=round(time.time() - t0, 2) if t0 else 0.0,
            error=error,
        )


def generate_document(answers: SurveyAnswers, settings: Optional[GenerationSettings] = None) -> str:
    """Synchronous wrapper for scripts and tests outside an event loop."""
    return asyncio.run(GenerationGateway(settings).generate(answers))
