import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables if present
load_dotenv()


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    profile_sample_size: int = 100
    profile_sample_values: int = 5
    profile_type_threshold: float = 0.8
    histogram_bins: int = 10
    chart_max_groups: int = 20
    summary_sample_rows: int = 10
    max_upload_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"
    port: int = 8000


def load_settings() -> Settings:
    """Build settings from the process environment."""
    return Settings(
        profile_sample_size=_get_int("PROFILE_SAMPLE_SIZE", 100),
        profile_sample_values=_get_int("PROFILE_SAMPLE_VALUES", 5),
        profile_type_threshold=_get_float("PROFILE_TYPE_THRESHOLD", 0.8),
        histogram_bins=_get_int("HISTOGRAM_BINS", 10),
        chart_max_groups=_get_int("CHART_MAX_GROUPS", 20),
        summary_sample_rows=_get_int("SUMMARY_SAMPLE_ROWS", 10),
        max_upload_bytes=_get_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=_get_int("PORT", 8000),
    )
