import json
import logging
from typing import Any, Dict, List, Optional

import requests

from agents.errors import RequestFailed, StructuredResponseInvalid
from llm_config import (
    LLM_API_KEY,
    LLM_TIMEOUT,
    CHAT_COMPLETIONS_PATH,
)

logger = logging.getLogger(__name__)


class OpenAIStyleClient:
    """Low-level HTTP client for OpenAI-style chat completions."""

    def __init__(self, base_url: str, model_name: str, path: str = CHAT_COMPLETIONS_PATH):
        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.path = "/" + path.lstrip("/")

    @property
    def url(self) -> str:
        return self.base_url + self.path

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if LLM_API_KEY:
            headers["Authorization"] = f"Bearer {LLM_API_KEY}"
        return headers

    def build_payload(
        self,
        messages: List[Dict[str, str]],
        stream: bool,
        json_schema: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "messages": messages,
            "temperature": kwargs.get("temperature", 0.7),
            "max_tokens": kwargs.get("max_tokens", 1024),
            "stream": stream,
        }
        if json_schema is not None:
            payload["json_schema"] = json_schema
        return payload

    def chat(
        self,
        messages: List[Dict[str, str]],
        json_schema: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> str:
        """Non-streamed request. Returns choices[0].message.content."""
        payload = self.build_payload(messages, stream=False, json_schema=json_schema, **kwargs)
        try:
            resp = requests.post(
                self.url, headers=self._headers(), json=payload, timeout=LLM_TIMEOUT
            )
        except requests.RequestException as e:
            raise RequestFailed(f"Request to {self.url} failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise RequestFailed(
                f"Request to {self.url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise StructuredResponseInvalid("Response body is not JSON") from e

        # Standard OpenAI-style result
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise StructuredResponseInvalid(
                "Response has no choices[0].message.content"
            ) from e
        if not isinstance(content, str):
            raise StructuredResponseInvalid("Message content is not a string")
        return content

    def chat_json(
        self,
        messages: List[Dict[str, str]],
        json_schema: Dict[str, Any],
        **kwargs: Any,
    ) -> Any:
        """Structured request: the message content is itself a JSON document."""
        content = self.chat(messages, json_schema=json_schema, **kwargs)
        try:
            return json.loads(content)
        except ValueError as e:
            raise StructuredResponseInvalid("Message content is not valid JSON") from e

    def open_stream(self, messages: List[Dict[str, str]], **kwargs: Any) -> requests.Response:
        """
        Streamed request. The status code is left for the stream consumer
        to check, so a non-2xx response is returned, not raised.
        """
        payload = self.build_payload(messages, stream=True, **kwargs)
        logger.debug("Opening stream to %s with %d messages", self.url, len(messages))
        try:
            return requests.post(
                self.url,
                headers=self._headers(),
                json=payload,
                timeout=LLM_TIMEOUT,
                stream=True,
            )
        except requests.RequestException as e:
            raise RequestFailed(f"Request to {self.url} failed: {e}") from e
