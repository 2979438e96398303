"""Scene description backends for rasterised SVGs."""

from __future__ import annotations

import base64
import json
import logging
from typing import Dict, List, Optional

from svgworks.libs.vlm import (
    BaseBackendClient,
    VLMBackend,
    VLMBackendError,
    create_backend_client,
)

from .config import SvgDescriberConfig
from .errors import DescribeError
from .prompts import DESCRIPTION_FIELD, DESCRIPTION_PROMPT, response_format

logger = logging.getLogger(__name__)


def tidy_description(text: str) -> str:
    """Collapse runs of whitespace so the text fits on one catalog line."""

    return " ".join(text.split())


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.removeprefix("```json").removeprefix("```")
        if text.endswith("```"):
            text = text[:-3]
    return text.strip()


def parse_description_payload(content: str) -> str:
    """Return the ``description`` field of a structured model reply.

    Anything other than a JSON object holding a non-empty string under
    ``description`` is rejected; there is no best-effort recovery.
    """

    text = _strip_code_fence(content)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DescribeError(f"Response is not valid JSON: {text[:120]!r}") from exc

    if not isinstance(payload, dict):
        raise DescribeError(f"Expected a JSON object, got {type(payload).__name__}")
    value = payload.get(DESCRIPTION_FIELD)
    if not isinstance(value, str):
        raise DescribeError(f"Response is missing a string '{DESCRIPTION_FIELD}' field")
    description = tidy_description(value)
    if not description:
        raise DescribeError("Response contained an empty description")
    return description


class BaseDescriber:
    """Common interface: PNG bytes in, one short description out."""

    def describe(self, raster: bytes) -> str:
        raise NotImplementedError

    def preflight(self) -> None:
        """Hook for checking the service before a batch starts."""

    def close(self) -> None:
        """Hook for releasing backend resources."""


class OpenAIDescriber(BaseDescriber):
    """Describe images through an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        config: SvgDescriberConfig,
        *,
        client: Optional[BaseBackendClient] = None,
    ) -> None:
        self.config = config
        self._client = client or create_backend_client(
            self._resolve_backend(config.backend),
            base_url=config.base_url,
            model_name=config.model,
            api_key=config.api_key,
            timeout=config.timeout,
        )

    @staticmethod
    def _resolve_backend(value: str) -> VLMBackend:
        try:
            return VLMBackend(value.lower())
        except ValueError as exc:
            raise ValueError(f"Unknown backend '{value}'") from exc

    def build_messages(self, raster: bytes) -> List[Dict[str, object]]:
        image_b64 = base64.b64encode(raster).decode("utf-8")
        return [
            {"role": "system", "content": DESCRIPTION_PROMPT.system},
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/png;base64,{image_b64}"},
                    },
                    {"type": "text", "text": DESCRIPTION_PROMPT.render()},
                ],
            },
        ]

    def describe(self, raster: bytes) -> str:
        payload = {
            "model": self.config.model,
            "messages": self.build_messages(raster),
            "max_tokens": max(
                1, self.config.max_new_tokens or DESCRIPTION_PROMPT.max_new_tokens or 1
            ),
            "temperature": max(0.0, self.config.temperature),
            "response_format": response_format(),
            "stream": False,
        }

        try:
            data = self._client.chat_completions(payload)
        except VLMBackendError as exc:
            raise DescribeError(f"Description request failed: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise DescribeError(f"Unexpected completion payload: {exc}") from exc
        if not isinstance(content, str):
            raise DescribeError("Completion message has no text content")

        return parse_description_payload(content)

    def preflight(self) -> None:
        logger.info(
            "Preflight: checking %s backend at %s (model %s)",
            self.config.backend,
            self.config.base_url,
            self.config.model,
        )
        if not self._client.health_check():
            raise RuntimeError(
                f"Preflight: description backend at {self.config.base_url} is not "
                f"reachable ({self._client.last_error or 'no response'})"
            )
        logger.info("Preflight succeeded for model '%s'", self.config.model)

    def close(self) -> None:
        self._client.close()


def create_describer(config: SvgDescriberConfig) -> BaseDescriber:
    """Factory for the configured description backend."""

    return OpenAIDescriber(config)
