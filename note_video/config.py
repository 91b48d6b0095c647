import shutil
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from note_video.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "note-video-worker"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Shared secret expected in "Authorization: Bearer <secret>"
    worker_secret_key: str = ""

    # Text-to-speech
    elevenlabs_api_key: str = ""
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    http_timeout_seconds: float = 60.0

    # Text-to-image
    huggingface_api_token: str = ""
    huggingface_model_url: str = (
        "https://api-inference.huggingface.co/models/stabilityai/stable-diffusion-xl-base-1.0"
    )
    image_timeout_seconds: float = 120.0
    image_retry_attempts: int = Field(default=2, ge=1)
    image_retry_delay_seconds: float = Field(default=20.0, ge=0)

    # Media toolchain
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    pixel_format: str = "yuv420p"
    temp_root: str | None = None

    # Supabase object storage
    storage_bucket: str = "videos"
    storage_prefix: str = "note-videos"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_public_url: str = ""

    def validate_runtime(self) -> None:
        required = {
            "ELEVENLABS_API_KEY": self.elevenlabs_api_key,
            "HUGGINGFACE_API_TOKEN": self.huggingface_api_token,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_SERVICE_ROLE_KEY": self.supabase_service_role_key,
        }
        missing = [name for name, value in required.items() if not value.strip()]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")
        for binary in (self.ffmpeg_binary, self.ffprobe_binary):
            if shutil.which(binary) is None:
                raise ConfigurationError(f"{binary} executable could not be resolved.")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
