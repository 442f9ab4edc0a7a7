"""Configuration constants for the agmarknet crawler."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("AGMARKNET_DATA_DIR", "data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
STATUS_FILE: Path = DATA_DIR / "status.json"
SUMMARY_FILE: Path = DATA_DIR / "last_summary.json"
OUTPUT_FILE_TEMPLATE: str = "crop_data_{year}.csv"

BASE_URL: str = os.getenv(
    "AGMARKNET_BASE_URL",
    "http://agmarknet.gov.in/PriceAndArrivals/CommodityDailyStateWise_cat.aspx",
)

REGIONS: tuple[str, ...] = (
    "Andhra Pradesh",
    "Arunachal Pradesh",
    "Assam",
    "Bihar",
    "Chandigarh",
    "Chattisgarh",
    "Dadra and Nagar Haveli",
    "Daman and Diu",
    "Goa",
    "Gujarat",
    "Haryana",
    "Himachal Pradesh",
    "Jammu and Kashmir",
    "Jharkhand",
    "Karnataka",
    "Kerala",
    "Madhya Pradesh",
    "Maharashtra",
    "Manipur",
    "Meghalaya",
    "Mizoram",
    "Nagaland",
    "NCT of Delhi",
    "Odisha",
    "Pondicherry",
    "Punjab",
    "Rajasthan",
    "Sikkim",
    "Tamil Nadu",
    "Telangana",
    "Tripura",
    "Uttar Pradesh",
    "Uttrakhand",
    "West Bengal",
)

MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

YEARS: tuple[int, ...] = (2015, 2016, 2017)


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


# Playwright timeouts (seconds)
# Navigation timeout for page.goto calls.
NAV_TIMEOUT_SECONDS: int = _parse_timeout_seconds("AGMARKNET_NAV_TIMEOUT_SECONDS", 30)
# Waits for the filter dropdowns to be attached.
SELECTOR_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "AGMARKNET_SELECTOR_TIMEOUT_SECONDS", 30
)
# Bounded wait for the "view report" button after clicking a day link.
REPORT_BUTTON_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "AGMARKNET_REPORT_BUTTON_TIMEOUT_SECONDS", 10
)
# The calendar header and the results table are waited on without a timeout;
# Playwright treats 0 as "no timeout".
CALENDAR_SYNC_TIMEOUT_MS: int = 0
RESULTS_TABLE_TIMEOUT_MS: int = 0

LOG_LEVEL: str = os.getenv("AGMARKNET_LOG_LEVEL", "INFO").strip().upper()

HEADLESS: bool = os.getenv("AGMARKNET_HEADLESS", "true").strip().lower() not in {"0", "false"}

USER_AGENT: str = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def output_path(year: int) -> Path:
    """Return the append-only CSV path for ``year``."""

    return DATA_DIR / OUTPUT_FILE_TEMPLATE.format(year=year)
