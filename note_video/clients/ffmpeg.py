from __future__ import annotations

import logging
import os
import subprocess
from typing import Optional, Sequence

from note_video.errors import EncodingError, ProbeError
from note_video.models.domain import EncodeOptions


class FFprobeProber:
    def __init__(self, binary: str = "ffprobe", logger: Optional[logging.Logger] = None) -> None:
        self.binary = binary
        self.log = logger or logging.getLogger(__name__)

    def probe(self, path: str) -> float:
        cmd = [
            self.binary,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            path,
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as exc:
            raise ProbeError(f"could not run {self.binary}: {exc}") from exc
        if result.stderr:
            self.log.warning("ffprobe stderr", extra={"path": path, "stderr": result.stderr.strip()})
        if result.returncode != 0:
            raise ProbeError(f"ffprobe failed with code {result.returncode}: {result.stderr.strip()}")
        return parse_duration(result.stdout)


def parse_duration(output: str) -> float:
    try:
        return float(output.strip())
    except ValueError:
        return 0.0


class FFmpegEncoder:
    def __init__(
        self,
        binary: str = "ffmpeg",
        options: EncodeOptions | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.binary = binary
        self.options = options or EncodeOptions()
        self.log = logger or logging.getLogger(__name__)

    def build_command(self, inputs: Sequence[str], output_path: str) -> list[str]:
        cmd = [self.binary, "-y"]
        for manifest in inputs:
            cmd.extend(["-f", "concat", "-safe", "0", "-i", manifest])
        cmd.extend(self.options.output_args())
        cmd.append(output_path)
        return cmd

    def encode(self, inputs: Sequence[str], output_path: str) -> bytes:
        cmd = self.build_command(inputs, output_path)
        self.log.info("running ffmpeg", extra={"inputs": list(inputs), "output": output_path})
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as exc:
            raise EncodingError(f"could not run {self.binary}: {exc}") from exc
        if result.returncode != 0:
            stderr = result.stderr.strip()
            self.log.error("ffmpeg failed", extra={"returncode": result.returncode, "stderr": stderr[-2000:]})
            raise EncodingError(f"ffmpeg failed with code {result.returncode}: {stderr[-2000:]}")
        if not os.path.exists(output_path):
            raise EncodingError("FFmpeg did not produce a video file.")
        with open(output_path, "rb") as f:
            video = f.read()
        if not video:
            raise EncodingError("FFmpeg produced an empty video file.")
        return video
