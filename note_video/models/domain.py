from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class SceneAsset(BaseModel):
    index: int
    text: str
    audio_path: str
    image_path: str
    duration: float = Field(ge=0)


class EncodeOptions(BaseModel):
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    pixel_format: str = "yuv420p"
    shortest: bool = True

    def output_args(self) -> List[str]:
        args = [
            "-c:v",
            self.video_codec,
            "-c:a",
            self.audio_codec,
            "-pix_fmt",
            self.pixel_format,
        ]
        if self.shortest:
            args.append("-shortest")
        return args
