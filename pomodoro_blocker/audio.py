import sys
import math
import struct
import logging
import threading
from typing import Sequence

from .config import (
    BREAK_TO_WORK_NOTES,
    CHIME_NOTE_MS,
    CHIME_VOLUME,
    LOG_NAME,
    SAMPLE_RATE,
    WORK_TO_BREAK_NOTES,
)
from .scheduler import PhaseTransition


def _wrap_wav_header(pcm_data: bytes, sample_rate: int) -> bytes:
    data_size = len(pcm_data)
    riff_size = 36 + data_size
    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        riff_size,
        b"WAVE",
        b"fmt ",
        16,
        1,
        1,
        sample_rate,
        sample_rate * 2,
        2,
        16,
        b"data",
        data_size,
    )
    return header + pcm_data


def generate_chime_wav_bytes(
    notes: Sequence[float],
    note_ms: int = CHIME_NOTE_MS,
    volume: float = CHIME_VOLUME,
    sample_rate: int = SAMPLE_RATE,
) -> bytes:
    volume = max(0.0, min(1.0, float(volume)))
    n_samples = max(1, int(sample_rate * note_ms / 1000.0))
    max_amp = int(32767 * volume)

    frames = bytearray()
    for freq in notes:
        for i in range(n_samples):
            t = i / sample_rate
            envelope = 1.0 - (i / n_samples)
            sample_val = int(max_amp * envelope * math.sin(2.0 * math.pi * freq * t))
            frames += struct.pack("<h", sample_val)

    return _wrap_wav_header(bytes(frames), sample_rate)


def play_wav_async(wav_data: bytes, logger: logging.Logger | None = None) -> None:
    logger = logger or logging.getLogger(LOG_NAME)
    if sys.platform != "win32":
        logger.info("Chime skipped: audio playback is Windows-only")
        return

    def _play():
        import winsound

        try:
            winsound.PlaySound(wav_data, winsound.SND_MEMORY)
        except RuntimeError:
            logger.exception("Chime playback failed")

    threading.Thread(target=_play, daemon=True).start()


class PhaseAlarm:
    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(LOG_NAME)
        self._break_chime = generate_chime_wav_bytes(WORK_TO_BREAK_NOTES)
        self._work_chime = generate_chime_wav_bytes(BREAK_TO_WORK_NOTES)

    def chime_for(self, transition: PhaseTransition) -> bytes:
        return self._break_chime if transition.is_break_start else self._work_chime

    def __call__(self, transition: PhaseTransition) -> None:
        play_wav_async(self.chime_for(transition), self._logger)
