"""Completion chime adapter - tone synthesis played through a system audio player."""

import io
import logging
import math
import os
import shutil
import subprocess
import tempfile
import threading
import wave

logger = logging.getLogger(__name__)

SAMPLE_RATE = 48000
C5 = 523.25
G5 = 783.99
GAP_MS = 80
VOLUME = 0.25

# Bell-like partials (non-integer ratios) as (ratio, amplitude)
HARMONICS = ((1.0, 0.4), (2.76, 0.15), (5.40, 0.10), (8.93, 0.05))
REVERB_DELAYS_S = (0.03, 0.05, 0.08)
ATTACK_SAMPLES = 100

PLAYERS = ("afplay", "paplay", "pw-play", "aplay")


def chime_samples(frequency: float, duration_ms: int, sample_rate: int = SAMPLE_RATE) -> list[float]:
    """
    Synthesize one bell note in [-1, 1].

    Exponential decay with a short linear attack, mixed with three quieter
    echoes of itself for a little room sound.
    """
    num_samples = sample_rate * duration_ms // 1000
    delays = [int(sample_rate * d) for d in REVERB_DELAYS_S]
    buffer = [0.0] * max(delays)
    two_pi = 2.0 * math.pi

    samples = []
    for n in range(num_samples):
        t = n / sample_rate
        value = sum(math.sin(t * frequency * ratio * two_pi) * amp for ratio, amp in HARMONICS)
        attack = n / ATTACK_SAMPLES if n < ATTACK_SAMPLES else 1.0
        value *= math.exp(-t * 3.0) * attack

        reverb = 0.0
        for i, delay in enumerate(delays):
            if n >= delay:
                reverb += buffer[(n - delay) % len(buffer)] * (0.3 / (i + 1))
        buffer[n % len(buffer)] = value

        samples.append((value + reverb) * VOLUME)
    return samples


def completion_chime(sample_rate: int = SAMPLE_RATE) -> list[float]:
    """A rising perfect fifth: C5 for 350ms, a short gap, then a longer G5."""
    gap = [0.0] * (sample_rate * GAP_MS // 1000)
    return chime_samples(C5, 350, sample_rate) + gap + chime_samples(G5, 500, sample_rate)


def to_wav_bytes(samples: list[float], sample_rate: int = SAMPLE_RATE) -> bytes:
    """Encode mono float samples as 16-bit PCM WAV."""
    frames = bytearray()
    for s in samples:
        clipped = max(-1.0, min(1.0, s))
        frames += int(clipped * 32767).to_bytes(2, "little", signed=True)

    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(bytes(frames))
    return out.getvalue()


def find_player(preferred: str = "") -> str | None:
    """Locate an audio player binary, honouring a configured choice first."""
    candidates = (preferred,) + PLAYERS if preferred else PLAYERS
    for name in candidates:
        path = shutil.which(name)
        if path:
            return path
    return None


class ChimeNotifier:
    """
    Plays the completion chime in the background.

    Implements CompletionNotifier protocol. Each call spawns a detached daemon
    thread that is never joined; back-to-back completions may overlap.
    """

    def __init__(self, player: str = "", timeout: int = 10):
        self.player = player
        self.timeout = timeout
        self._wav: bytes | None = None

    def notify_complete(self) -> None:
        threading.Thread(target=self._play, name="nudge-chime", daemon=True).start()

    def _wav_bytes(self) -> bytes:
        if self._wav is None:
            self._wav = to_wav_bytes(completion_chime())
        return self._wav

    def _play(self) -> None:
        player = find_player(self.player)
        if not player:
            logger.debug("No audio player found, skipping chime")
            return

        fd, path = tempfile.mkstemp(prefix="nudge-chime-", suffix=".wav")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(self._wav_bytes())
            subprocess.run(
                [player, path],
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Chime player timed out after {self.timeout}s")
        except OSError as e:
            logger.warning(f"Failed to play chime: {e}")
        finally:
            try:
                os.unlink(path)
            except OSError as e:
                logger.debug(f"Could not remove {path}: {e}")


class SilentNotifier:
    """Notifier used when the chime is turned off."""

    def notify_complete(self) -> None:
        logger.debug("Task completed (chime disabled)")
