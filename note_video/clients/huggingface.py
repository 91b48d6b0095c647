from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional

import httpx

from note_video.errors import ImageCallError

DEFAULT_MODEL_URL = "https://api-inference.huggingface.co/models/stabilityai/stable-diffusion-xl-base-1.0"
DEFAULT_STYLE = "simple educational illustration"

STYLE_GUIDE = {
    "Biology": "clear educational diagram style, vibrant colors, labels",
    "Chemistry": "scientific illustration of molecules and reactions, digital art",
    "Physics": "clean physics diagram, showing forces and vectors, minimalist",
    "History": "realistic historical photograph style, black and white, cinematic lighting",
    "Literature": "dramatic oil painting, expressive, rich colors",
    "Mathematics": "clear handwritten chalkboard style, showing the steps of the equation",
}


def build_image_prompt(text: str, subject_name: str) -> str:
    style = STYLE_GUIDE.get(subject_name, DEFAULT_STYLE)
    return f'An educational visual for a {subject_name} tutorial about: "{text}". Style: {style}.'


@dataclass(frozen=True)
class RetryPolicy:
    """How often an image request is repeated while the hosted model warms up.

    Hugging Face answers 503 while a cold model is being loaded. With the
    defaults the request is sent at most twice with a fixed 20 second pause.
    """

    max_attempts: int = 2
    backoff_seconds: float = 20.0
    retry_statuses: FrozenSet[int] = field(default_factory=lambda: frozenset({503}))

    def should_retry(self, status_code: int, attempt: int) -> bool:
        return status_code in self.retry_statuses and attempt < self.max_attempts


class HuggingFaceImageClient:
    def __init__(
        self,
        api_token: str | None,
        model_url: str = DEFAULT_MODEL_URL,
        retry_policy: RetryPolicy | None = None,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_token = (api_token or "").strip()
        self.model_url = model_url
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout
        self.transport = transport
        self._sleep = sleep
        self.log = logger or logging.getLogger(__name__)

    def enabled(self) -> bool:
        return bool(self.api_token)

    def synthesize(self, text: str, subject_name: str) -> bytes:
        if not self.enabled():
            raise ImageCallError("Hugging Face client is not configured")
        prompt = build_image_prompt(text, subject_name)
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        self.log.info("requesting image", extra={"prompt": prompt, "model_url": self.model_url})
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            attempt = 0
            while True:
                attempt += 1
                try:
                    response = client.post(self.model_url, headers=headers, json={"inputs": prompt})
                except httpx.HTTPError as exc:
                    self.log.error("hugging face request failed", extra={"error": str(exc), "attempt": attempt})
                    raise ImageCallError(f"Hugging Face request failed: {exc}") from exc
                if not self.retry_policy.should_retry(response.status_code, attempt):
                    break
                self.log.info(
                    "model is loading, retrying",
                    extra={"status": response.status_code, "attempt": attempt, "delay": self.retry_policy.backoff_seconds},
                )
                self._sleep(self.retry_policy.backoff_seconds)

        if response.status_code != 200:
            body = response.text
            self.log.error("hugging face HTTP error", extra={"status": response.status_code, "body": body})
            raise ImageCallError(f"Hugging Face API failed with status {response.status_code}: {body}")
        content_type = response.headers.get("content-type", "").lower()
        if "application/json" in content_type:
            raise ImageCallError(f"Hugging Face API returned JSON instead of an image: {response.text}")
        image = response.content
        if not image:
            raise ImageCallError("Hugging Face API returned an empty image.")
        self.log.info("image generated", extra={"content_length": len(image), "attempts": attempt})
        return image
