"""HTTP adapters for the OpenAI-compatible vision endpoints svgworks talks to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type
import logging
import os
import time

import requests

logger = logging.getLogger(__name__)

NO_API_KEY = "EMPTY"


class VLMBackend(str, Enum):
    """Supported backend identifiers."""

    VLLM = "vllm"
    LMDEPLOY = "lmdeploy"
    GEMINI = "gemini"


class VLMBackendError(RuntimeError):
    """Raised when a completion request fails at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BaseBackendClient(ABC):
    """Session-backed client for one chat completions endpoint."""

    # Consulted in order when no explicit key is configured.
    API_KEY_ENV_VARS: Tuple[str, ...] = ()

    def __init__(
        self,
        *,
        base_url: str,
        model_name: str,
        api_key: str = NO_API_KEY,
        timeout: int = 120,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.api_key = self.resolve_api_key(api_key)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            }
        )
        self.last_error: Optional[str] = None

    @classmethod
    def resolve_api_key(cls, api_key: Optional[str]) -> str:
        if api_key and api_key != NO_API_KEY:
            return api_key
        for env_name in cls.API_KEY_ENV_VARS:
            value = os.environ.get(env_name, "").strip()
            if value:
                return value
        return NO_API_KEY

    @property
    def has_api_key(self) -> bool:
        return self.api_key != NO_API_KEY

    @abstractmethod
    def health_check(self) -> bool:
        """Return True when the backend is reachable and ready."""

    @abstractmethod
    def chat_completions(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Execute one chat completion request and return the decoded body."""

    def close(self) -> None:
        self.session.close()


class OpenAICompatibleBackend(BaseBackendClient):
    """Self-hosted OpenAI-compatible server (vLLM and friends)."""

    MODELS_PATH = "/models"
    HEALTH_PATHS: Tuple[str, ...] = ("/health",)

    def health_check(self) -> bool:
        try:
            response = self.session.get(
                f"{self.base_url}{self.MODELS_PATH}", timeout=min(self.timeout, 10)
            )
            if response.status_code == 200:
                self.last_error = None
                return True
            self.last_error = f"HTTP {response.status_code}: {response.text[:200]}"
        except requests.RequestException as exc:
            self.last_error = str(exc)
            logger.debug("Model listing probe failed: %s", exc)

        for path in self.HEALTH_PATHS:
            try:
                response = self.session.get(
                    f"{self.base_url}{path}", timeout=min(self.timeout, 5)
                )
            except requests.RequestException as exc:
                self.last_error = str(exc)
                logger.debug("Health probe %s failed: %s", path, exc)
                continue
            if response.status_code == 200:
                self.last_error = None
                return True

        return False

    def chat_completions(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/chat/completions"
        started = time.perf_counter()
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise VLMBackendError(f"Request to {url} failed: {exc}") from exc
        logger.debug(
            "POST %s -> %s in %.2fs",
            url,
            response.status_code,
            time.perf_counter() - started,
        )

        if response.status_code != 200:
            raise VLMBackendError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise VLMBackendError(f"Response from {url} is not JSON") from exc
        if not isinstance(body, dict):
            raise VLMBackendError(f"Response from {url} is not a JSON object")
        return body


class LMDeployBackend(OpenAICompatibleBackend):
    """LMDeploy exposes its health endpoint under the API prefix."""

    HEALTH_PATHS = OpenAICompatibleBackend.HEALTH_PATHS + ("/v1/health",)


class GeminiBackend(OpenAICompatibleBackend):
    """Google's hosted OpenAI-compatible Gemini endpoint.

    Only the model listing is available for probing, and it requires a key,
    so a missing key fails the health check without a network round trip.
    """

    API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
    HEALTH_PATHS = ()

    def health_check(self) -> bool:
        if not self.has_api_key:
            self.last_error = (
                "no API key configured (set GEMINI_API_KEY or default_api_key)"
            )
            return False
        return super().health_check()


BACKEND_REGISTRY: Dict[VLMBackend, Type[BaseBackendClient]] = {
    VLMBackend.VLLM: OpenAICompatibleBackend,
    VLMBackend.LMDEPLOY: LMDeployBackend,
    VLMBackend.GEMINI: GeminiBackend,
}


def create_backend_client(
    backend: VLMBackend,
    *,
    base_url: str,
    model_name: str,
    api_key: str = NO_API_KEY,
    timeout: int = 120,
    session: Optional[requests.Session] = None,
) -> BaseBackendClient:
    """Instantiate the adapter registered for *backend*."""

    backend_cls = BACKEND_REGISTRY.get(backend)
    if backend_cls is None:
        raise ValueError(f"Unsupported VLM backend: {backend}")

    return backend_cls(
        base_url=base_url,
        model_name=model_name,
        api_key=api_key,
        timeout=timeout,
        session=session,
    )
