# server/groq_client.py
from typing import Any, Dict, Optional

import httpx

from .schemas import CompletionRequest


class GroqError(Exception):
    """Raised when the Groq API answers with a non-success status."""

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Groq error: status={status_code}, body={body!r}")

    @property
    def message(self) -> Optional[str]:
        if not isinstance(self.body, dict):
            return None
        err = self.body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err.strip():
            return err
        if self.body.get("message"):
            return str(self.body["message"])
        return None


class GroqTransportError(Exception):
    """Raised when the Groq API could not be reached or sent back garbage."""


def build_client(timeout: float) -> httpx.Client:
    return httpx.Client(timeout=timeout)


def create_chat_completion(
    request: CompletionRequest,
    *,
    api_key: str,
    api_url: str,
    client: httpx.Client,
) -> Dict[str, Any]:
    """
    POST one chat completion and return the decoded response body.
    """
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    try:
        resp = client.post(api_url, json=request.model_dump(), headers=headers)
    except httpx.HTTPError as exc:
        raise GroqTransportError(f"Groq request failed: {exc!r}") from exc

    if not resp.is_success:
        try:
            body: Any = resp.json()
        except ValueError:
            body = resp.text
        raise GroqError(resp.status_code, body)

    try:
        return resp.json()
    except ValueError as exc:
        raise GroqTransportError(
            f"Groq returned a non-JSON body: status={resp.status_code}"
        ) from exc


def completion_text(data: Dict[str, Any]) -> str:
    """First choice's message content, or "" when the shape is off."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""
