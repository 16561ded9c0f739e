from __future__ import annotations

import logging
import os
import platform
import subprocess
import sys
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# (frequency Hz, duration ms) per cue kind
BEEPS = {
    "correct": (880, 200),
    "wrong": (220, 300),
    "click": (440, 100),
}

MACOS_SOUNDS = {
    "correct": "Glass.aiff",
    "wrong": "Basso.aiff",
    "click": "Tink.aiff",
}


def play_feedback_sound(sound: str, *, bell: Optional[Callable[[], None]] = None) -> None:
    if sound not in BEEPS:
        raise ValueError(f"Unknown sound cue: {sound!r}")
    system = platform.system()

    if system == "Windows":

        def _windows() -> None:
            try:
                import winsound

                frequency, duration = BEEPS[sound]
                winsound.Beep(frequency, duration)
            except Exception:
                logger.debug(f"winsound beep failed for {sound}")

        threading.Thread(target=_windows, daemon=True).start()
    elif system == "Darwin":

        def _macos() -> None:
            path = os.path.join("/System/Library/Sounds", MACOS_SOUNDS[sound])
            try:
                subprocess.run(
                    ["afplay", path],
                    check=False,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except FileNotFoundError:
                logger.debug("afplay not found")

        threading.Thread(target=_macos, daemon=True).start()
    else:
        if bell is not None:
            try:
                bell()
            except Exception:
                logger.debug(f"bell callback failed for {sound}")
        else:
            try:
                sys.stdout.write("\a")
                sys.stdout.flush()
            except Exception:
                logger.debug("terminal bell unavailable")
