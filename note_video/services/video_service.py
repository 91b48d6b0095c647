from __future__ import annotations

import logging
from typing import Union

from note_video.clients.ffmpeg import FFmpegEncoder, FFprobeProber
from note_video.clients.huggingface import HuggingFaceImageClient, RetryPolicy
from note_video.clients.supabase_storage import SupabaseStorageClient
from note_video.clients.tts import ElevenLabsClient
from note_video.config import Settings
from note_video.models.domain import EncodeOptions
from note_video.services.pipeline import ScenePipeline
from note_video.services.publisher import StoragePublisher


class NoteVideoService:
    def __init__(self, pipeline: ScenePipeline, publisher: StoragePublisher) -> None:
        self.pipeline = pipeline
        self.publisher = publisher
        self.log = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings) -> "NoteVideoService":
        log = logging.getLogger(__name__)
        tts = ElevenLabsClient(
            api_key=settings.elevenlabs_api_key,
            voice_id=settings.elevenlabs_voice_id,
            model_id=settings.elevenlabs_model_id,
            base_url=settings.elevenlabs_base_url,
            timeout=settings.http_timeout_seconds,
            logger=log,
        )
        images = HuggingFaceImageClient(
            api_token=settings.huggingface_api_token,
            model_url=settings.huggingface_model_url,
            retry_policy=RetryPolicy(
                max_attempts=settings.image_retry_attempts,
                backoff_seconds=settings.image_retry_delay_seconds,
            ),
            timeout=settings.image_timeout_seconds,
            logger=log,
        )
        pipeline = ScenePipeline(
            tts=tts,
            images=images,
            prober=FFprobeProber(binary=settings.ffprobe_binary, logger=log),
            encoder=FFmpegEncoder(
                binary=settings.ffmpeg_binary,
                options=EncodeOptions(
                    video_codec=settings.video_codec,
                    audio_codec=settings.audio_codec,
                    pixel_format=settings.pixel_format,
                ),
                logger=log,
            ),
            temp_root=settings.temp_root,
            logger=log,
        )
        storage = SupabaseStorageClient(
            api_url=settings.supabase_url,
            bucket=settings.storage_bucket,
            api_key=settings.supabase_service_role_key,
            public_url=settings.supabase_public_url,
            timeout=settings.http_timeout_seconds,
            logger=log,
        )
        publisher = StoragePublisher(storage=storage, prefix=settings.storage_prefix, logger=log)
        return cls(pipeline=pipeline, publisher=publisher)

    def generate_video(self, note_id: Union[int, str, None], note_text: str, subject_name: str) -> str:
        self.log.info("video generation requested", extra={"note_id": note_id, "subject": subject_name})
        key = self.publisher.video_key(note_id)
        video = self.pipeline.run(note_text, subject_name)
        return self.publisher.publish(key, video)
