import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

MB = 1024 * 1024


@dataclass(frozen=True)
class TranscodingLimits:
    max_file_size_mb: float = 100
    max_duration_minutes: float = 10
    max_monthly_transcodes: int = 100
    cost_per_minute: float = 0.05
    seconds_per_mb: float = 10
    high_cost_threshold: float = 0.50

    @classmethod
    def from_settings(cls, conf: dict) -> "TranscodingLimits":
        return cls(
            max_file_size_mb=conf.get("TRANSCODE_MAX_FILE_SIZE_MB", cls.max_file_size_mb),
            max_duration_minutes=conf.get("TRANSCODE_MAX_DURATION_MINUTES", cls.max_duration_minutes),
            max_monthly_transcodes=conf.get("TRANSCODE_MAX_MONTHLY", cls.max_monthly_transcodes),
            cost_per_minute=conf.get("TRANSCODE_COST_PER_MINUTE", cls.cost_per_minute),
            seconds_per_mb=conf.get("TRANSCODE_SECONDS_PER_MB", cls.seconds_per_mb),
        )


@dataclass(frozen=True)
class ScreeningResult:
    allowed: bool
    estimated_minutes: float
    estimated_cost: float
    file_size_mb: float
    reason: Optional[str] = None


def estimate_minutes(file_size_mb: float, limits: TranscodingLimits) -> float:
    # File size is the only signal available, no codec inspection is done.
    return max(0.5, file_size_mb * limits.seconds_per_mb / 60)


def screen_upload(size_bytes: int, monthly_usage: int, limits: TranscodingLimits) -> ScreeningResult:
    """Decide whether a file may be transcoded if the direct upload is rejected."""
    size_mb = size_bytes / MB

    if size_mb > limits.max_file_size_mb:
        return ScreeningResult(
            allowed=False,
            estimated_minutes=0,
            estimated_cost=0,
            file_size_mb=size_mb,
            reason=(
                f"Video too large ({size_mb:.1f}MB). Maximum size for transcoding "
                f"is {limits.max_file_size_mb:g}MB to control costs."
            ),
        )

    minutes = estimate_minutes(size_mb, limits)
    cost = minutes * limits.cost_per_minute

    if minutes > limits.max_duration_minutes:
        return ScreeningResult(
            allowed=False,
            estimated_minutes=minutes,
            estimated_cost=cost,
            file_size_mb=size_mb,
            reason=(
                f"Video too long (~{minutes:.1f} minutes). Maximum duration for "
                f"transcoding is {limits.max_duration_minutes:g} minutes to control costs."
            ),
        )

    if monthly_usage >= limits.max_monthly_transcodes:
        return ScreeningResult(
            allowed=False,
            estimated_minutes=minutes,
            estimated_cost=cost,
            file_size_mb=size_mb,
            reason=(
                f"Monthly transcoding limit reached ({monthly_usage}/"
                f"{limits.max_monthly_transcodes})."
            ),
        )

    if cost > limits.high_cost_threshold:
        logger.warning("high cost transcode estimate: $%.2f (%.1f MB)", cost, size_mb)

    return ScreeningResult(
        allowed=True,
        estimated_minutes=minutes,
        estimated_cost=cost,
        file_size_mb=size_mb,
    )
