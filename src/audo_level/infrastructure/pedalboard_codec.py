"""Audio decode adapter backed by pedalboard."""

from __future__ import annotations

from io import BytesIO

from pedalboard.io import AudioFile

from audo_level.domain.errors import AudioDecodeError
from audo_level.domain.models import AudioBuffer


class PedalboardAudioDecoder:
    """Decode in-memory WAV/FLAC/AIFF/MP3/OGG bytes to channel-first PCM."""

    def decode(self, raw_bytes: bytes) -> AudioBuffer:
        if not raw_bytes:
            raise AudioDecodeError("empty_file", "Audio payload is empty.")

        try:
            with AudioFile(BytesIO(raw_bytes)) as audio_file:
                audio = audio_file.read(audio_file.frames)
                sample_rate = audio_file.samplerate
        except Exception as exc:  # noqa: BLE001
            raise AudioDecodeError("decode_failed", f"Could not decode audio payload: {exc}") from exc

        return AudioBuffer.from_array(audio, int(round(sample_rate)))
