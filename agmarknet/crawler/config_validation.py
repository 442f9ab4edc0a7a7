from __future__ import annotations

from typing import Iterable, Literal, Optional

from . import config
from .logging_utils import _crawler_event
from .utils import log_line

Entrypoint = Literal["ui", "cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _crawler_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_runtime_config(
    entrypoint: Entrypoint,
    *,
    regions: Optional[Iterable[str]] = None,
    years: Optional[Iterable[int]] = None,
    months: Optional[Iterable[str]] = None,
) -> None:
    """Validate runtime configuration and an optional crawl selection.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    """

    if not config.BASE_URL.strip().lower().startswith(("http://", "https://")):
        _raise_config_error(
            f"BASE_URL must be an http(s) URL, got {config.BASE_URL!r}.",
            entrypoint=entrypoint,
            error="invalid_base_url",
        )

    timeout_fields = [
        ("NAV_TIMEOUT_SECONDS", config.NAV_TIMEOUT_SECONDS),
        ("SELECTOR_TIMEOUT_SECONDS", config.SELECTOR_TIMEOUT_SECONDS),
        ("REPORT_BUTTON_TIMEOUT_SECONDS", config.REPORT_BUTTON_TIMEOUT_SECONDS),
    ]
    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )

    unknown_regions = sorted(set(regions or ()) - set(config.REGIONS))
    if unknown_regions:
        _raise_config_error(
            f"Unknown regions: {', '.join(unknown_regions)}",
            entrypoint=entrypoint,
            error="unknown_region",
        )

    unknown_months = sorted(set(months or ()) - set(config.MONTHS))
    if unknown_months:
        _raise_config_error(
            f"Unknown months: {', '.join(unknown_months)}",
            entrypoint=entrypoint,
            error="unknown_month",
        )

    if years is not None and not list(years):
        _raise_config_error(
            "At least one year must be selected.",
            entrypoint=entrypoint,
            error="no_years",
        )


__all__ = ["validate_runtime_config", "Entrypoint"]
