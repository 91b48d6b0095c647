import os

import pytest

from note_video.services.pipeline import ScenePipeline


class FakeSpeech:
    def __init__(self, audio: bytes = b"ID3 fake audio", error: Exception | None = None) -> None:
        self.audio = audio
        self.error = error
        self.calls = []

    def synthesize(self, text: str) -> bytes:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.audio


class FakeImages:
    def __init__(self, image: bytes = b"\x89PNG fake image", fail_at: int | None = None, error: Exception | None = None) -> None:
        self.image = image
        self.fail_at = fail_at
        self.error = error
        self.calls = []

    def synthesize(self, text: str, subject_name: str) -> bytes:
        self.calls.append((text, subject_name))
        if self.error is not None and (self.fail_at is None or len(self.calls) - 1 == self.fail_at):
            raise self.error
        return self.image


class FakeProber:
    def __init__(self, durations=None, default: float = 2.5) -> None:
        self.durations = list(durations or [])
        self.default = default
        self.calls = []

    def probe(self, path: str) -> float:
        self.calls.append(path)
        if self.durations:
            return self.durations.pop(0)
        return self.default


class FakeEncoder:
    def __init__(self, video: bytes = b"fake mp4 video") -> None:
        self.video = video
        self.calls = []
        self.manifests = []

    def encode(self, inputs, output_path: str) -> bytes:
        self.calls.append((list(inputs), output_path))
        contents = []
        for manifest in inputs:
            with open(manifest, encoding="utf-8") as f:
                contents.append(f.read())
        self.manifests = contents
        with open(output_path, "wb") as f:
            f.write(self.video)
        return self.video


@pytest.fixture
def work_root(tmp_path):
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def fakes():
    return {
        "tts": FakeSpeech(),
        "images": FakeImages(),
        "prober": FakeProber(),
        "encoder": FakeEncoder(),
    }


@pytest.fixture
def pipeline(fakes, work_root):
    return ScenePipeline(temp_root=str(work_root), **fakes)


def leftover_entries(root) -> list:
    return os.listdir(root)
