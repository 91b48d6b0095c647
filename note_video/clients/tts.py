from __future__ import annotations

import logging
from typing import Optional

import httpx

from note_video.errors import TtsAuthError, TtsCallError


class ElevenLabsClient:
    def __init__(
        self,
        api_key: str | None,
        voice_id: str = "21m00Tcm4TlvDq8ikWAM",
        model_id: str = "eleven_multilingual_v2",
        base_url: str = "https://api.elevenlabs.io",
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.voice_id = (voice_id or "").strip()
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.log = logger or logging.getLogger(__name__)

    def enabled(self) -> bool:
        return bool(self.api_key and self.voice_id)

    def synthesize(self, text: str) -> bytes:
        if not self.enabled():
            raise TtsCallError("ElevenLabs client is not configured")
        url = f"{self.base_url}/v1/text-to-speech/{self.voice_id}/stream"
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
        }
        headers = {
            "xi-api-key": self.api_key,
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
        }
        audio = bytearray()
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                with client.stream("POST", url, json=payload, headers=headers) as response:
                    if response.is_error:
                        body = response.read().decode("utf-8", errors="replace")
                        self.log.error(
                            "elevenlabs HTTP error",
                            extra={"status": response.status_code, "body": body, "voice_id": self.voice_id},
                        )
                        if response.status_code in (401, 403):
                            raise TtsAuthError(f"ElevenLabs rejected the API key ({response.status_code}): {body}")
                        raise TtsCallError(f"ElevenLabs HTTP {response.status_code}: {body}")
                    for chunk in response.iter_bytes():
                        audio.extend(chunk)
        except httpx.HTTPError as exc:
            self.log.error("elevenlabs request failed", extra={"error": str(exc), "voice_id": self.voice_id})
            raise TtsCallError(f"ElevenLabs request failed: {exc}") from exc
        if not audio:
            raise TtsCallError("ElevenLabs returned an empty audio stream.")
        self.log.info(
            "elevenlabs synthesis completed",
            extra={
                "voice_id": self.voice_id,
                "model_id": self.model_id,
                "content_length": len(audio),
            },
        )
        return bytes(audio)
