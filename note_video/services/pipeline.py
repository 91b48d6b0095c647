from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import List, Optional, Protocol, Sequence

from note_video.errors import EmptyInputError, ProbeError
from note_video.models.domain import SceneAsset
from note_video.services.scenes import split_scenes


class SpeechSynthesizer(Protocol):
    def synthesize(self, text: str) -> bytes: ...  # pragma: no cover


class ImageSynthesizer(Protocol):
    def synthesize(self, text: str, subject_name: str) -> bytes: ...  # pragma: no cover


class DurationProber(Protocol):
    def probe(self, path: str) -> float: ...  # pragma: no cover


class VideoEncoder(Protocol):
    def encode(self, inputs: Sequence[str], output_path: str) -> bytes: ...  # pragma: no cover


def concat_entry(path: str) -> str:
    # concat demuxer quoting: close the quote, emit an escaped quote, reopen
    escaped = os.path.abspath(path).replace("'", "'\\''")
    return f"file '{escaped}'"


def build_image_manifest(assets: Sequence[SceneAsset]) -> str:
    return "\n".join(f"{concat_entry(asset.image_path)}\nduration {asset.duration}" for asset in assets)


def build_audio_manifest(assets: Sequence[SceneAsset]) -> str:
    return "\n".join(concat_entry(asset.audio_path) for asset in assets)


class ScenePipeline:
    """Turns a note into an encoded slideshow video.

    Scenes are narrated, illustrated and measured one after another. Any
    failure aborts the whole run; the working directory is always removed.
    """

    IMAGE_MANIFEST = "imagelist.txt"
    AUDIO_MANIFEST = "audiolist.txt"
    OUTPUT_NAME = "final_video.mp4"

    def __init__(
        self,
        tts: SpeechSynthesizer,
        images: ImageSynthesizer,
        prober: DurationProber,
        encoder: VideoEncoder,
        temp_root: str | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.tts = tts
        self.images = images
        self.prober = prober
        self.encoder = encoder
        self.temp_root = temp_root
        self.log = logger or logging.getLogger(__name__)

    def run(self, note_text: str, subject_name: str) -> bytes:
        scenes = split_scenes(note_text)
        if not scenes:
            raise EmptyInputError("Could not break note into scenes.")

        tmpdir = tempfile.mkdtemp(prefix="ai-video-", dir=self.temp_root)
        self.log.info("video pipeline started", extra={"scenes": len(scenes), "tmpdir": tmpdir})
        try:
            assets: List[SceneAsset] = []
            for index, text in enumerate(scenes):
                assets.append(self._build_scene(tmpdir, index, len(scenes), text, subject_name))
            return self._assemble(tmpdir, assets)
        finally:
            self.log.debug("removing temp directory", extra={"tmpdir": tmpdir})
            shutil.rmtree(tmpdir, ignore_errors=True)

    def _build_scene(self, tmpdir: str, index: int, total: int, text: str, subject_name: str) -> SceneAsset:
        self.log.info("scene started", extra={"scene": index + 1, "total": total})

        audio_path = os.path.join(tmpdir, f"scene_{index}.mp3")
        audio = self.tts.synthesize(text)
        with open(audio_path, "wb") as f:
            f.write(audio)

        image_path = os.path.join(tmpdir, f"scene_{index}.png")
        image = self.images.synthesize(text, subject_name)
        with open(image_path, "wb") as f:
            f.write(image)

        duration = self.prober.probe(audio_path)
        if duration <= 0:
            raise ProbeError(f"Audio for scene {index + 1} has zero duration.")
        self.log.info(
            "scene assets ready",
            extra={
                "scene": index + 1,
                "audio_bytes": len(audio),
                "image_bytes": len(image),
                "duration": duration,
            },
        )
        return SceneAsset(
            index=index,
            text=text,
            audio_path=audio_path,
            image_path=image_path,
            duration=duration,
        )

    def _assemble(self, tmpdir: str, assets: Sequence[SceneAsset]) -> bytes:
        image_manifest = os.path.join(tmpdir, self.IMAGE_MANIFEST)
        with open(image_manifest, "w", encoding="utf-8") as f:
            f.write(build_image_manifest(assets))
        audio_manifest = os.path.join(tmpdir, self.AUDIO_MANIFEST)
        with open(audio_manifest, "w", encoding="utf-8") as f:
            f.write(build_audio_manifest(assets))

        output_path = os.path.join(tmpdir, self.OUTPUT_NAME)
        video = self.encoder.encode([image_manifest, audio_manifest], output_path)
        self.log.info(
            "video assembled",
            extra={"scenes": len(assets), "size": len(video), "total_duration": sum(a.duration for a in assets)},
        )
        return video
