"""FastAPI interface for Audo_Level."""

import asyncio

from fastapi import FastAPI, File, HTTPException, Query, UploadFile

from .analysis import measure_buffer
from .domain.errors import AudioDecodeError
from .domain.services import compute_gain, compute_gain_db
from .infrastructure.pedalboard_codec import PedalboardAudioDecoder
from .utils.config import load_settings_from_env

app = FastAPI(title="Audo_Level API", version="0.1.0")

_decoder = PedalboardAudioDecoder()


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok"}


@app.post("/measure")
async def measure(
    audio: UploadFile = File(..., description="Audio file to measure"),
    target_lufs: float | None = Query(None, le=0.0, description="Target loudness in LUFS."),
) -> dict[str, float | None]:
    """Measure integrated loudness and report the normalizing gain."""

    target = load_settings_from_env().normalizer.target_lufs if target_lufs is None else target_lufs
    raw_bytes = await audio.read()
    try:
        buffer = await asyncio.to_thread(_decoder.decode, raw_bytes)
    except AudioDecodeError as error:
        raise HTTPException(status_code=422, detail=error.as_dict()) from error

    measurement = await asyncio.to_thread(measure_buffer, buffer)
    return {
        "lufs": None if measurement.is_silent else measurement.lufs,
        "peak": measurement.peak,
        "peak_db": measurement.peak_db,
        "target_lufs": target,
        "gain_db": compute_gain_db(measurement, target),
        "gain": compute_gain(measurement, target),
    }
