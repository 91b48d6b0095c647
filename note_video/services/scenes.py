import re
from typing import List

SCENE_PATTERN = re.compile(r"[^.!?]+[.!?]+")


def split_scenes(text: str) -> List[str]:
    """Split a note into sentence scenes, keeping the terminating punctuation."""
    scenes = []
    for match in SCENE_PATTERN.finditer(text or ""):
        scene = match.group(0).strip()
        if scene:
            scenes.append(scene)
    return scenes
