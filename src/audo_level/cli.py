"""CLI interface for Audo_Level."""

import json
import logging
from dataclasses import dataclass

import typer

from .analysis import measure_buffer
from .domain.errors import MeasurementError
from .domain.models import LoudnessMeasurement
from .domain.services import compute_gain, compute_gain_db
from .infrastructure.http_fetcher import RequestsAudioFetcher
from .infrastructure.pedalboard_codec import PedalboardAudioDecoder
from .utils.config import load_settings_from_env

app = typer.Typer(help="Audo_Level loudness normalization tools")


@dataclass(frozen=True, slots=True)
class MeasurementReport:
    source: str
    measurement: LoudnessMeasurement
    target_lufs: float
    gain_db: float
    gain: float

    def as_dict(self) -> dict[str, object]:
        return {
            "source": self.source,
            "lufs": None if self.measurement.is_silent else self.measurement.lufs,
            "peak": self.measurement.peak,
            "peak_db": self.measurement.peak_db,
            "target_lufs": self.target_lufs,
            "gain_db": self.gain_db,
            "gain": self.gain,
        }


def _measure_source(source: str, target_lufs: float, timeout_seconds: float) -> MeasurementReport:
    raw_bytes = RequestsAudioFetcher(timeout_seconds=timeout_seconds).fetch(source)
    buffer = PedalboardAudioDecoder().decode(raw_bytes)
    measurement = measure_buffer(buffer)
    return MeasurementReport(
        source=source,
        measurement=measurement,
        target_lufs=target_lufs,
        gain_db=compute_gain_db(measurement, target_lufs),
        gain=compute_gain(measurement, target_lufs),
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    """Measure integrated loudness the way the playback normalizer does."""

    logging.basicConfig(level=log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command("measure")
def measure_command(
    source: str = typer.Argument(..., help="Local path, file:// URL or http(s) URL of the audio"),
    target_lufs: float | None = typer.Option(
        None,
        "--target-lufs",
        help="Target loudness; defaults to AUDO_LEVEL_TARGET_LUFS or -14.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Print integrated LUFS, sample peak and the gain the normalizer would apply."""

    settings = load_settings_from_env()
    target = settings.normalizer.target_lufs if target_lufs is None else target_lufs
    if target > 0.0:
        raise typer.BadParameter("--target-lufs must be <= 0.0.")

    try:
        report = _measure_source(source, target, settings.fetch_timeout_seconds)
    except MeasurementError as error:
        typer.echo(f"Measurement failed [{error.code}]: {error.message}", err=True)
        raise typer.Exit(code=1) from error

    if as_json:
        typer.echo(json.dumps(report.as_dict(), indent=2))
        return

    lufs = "silent" if report.measurement.is_silent else f"{report.measurement.lufs:.1f} LUFS"
    typer.echo(f"Integrated loudness: {lufs}")
    typer.echo(f"Sample peak: {report.measurement.peak_db:.1f} dBFS")
    typer.echo(f"Gain to {report.target_lufs:.1f} LUFS: {report.gain_db:+.1f} dB (x{report.gain:.3f})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
