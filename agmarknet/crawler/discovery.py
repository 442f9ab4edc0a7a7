"""Calendar navigation and day discovery for the report page."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from playwright.sync_api import BrowserContext, ConsoleMessage, ElementHandle, Page

from . import config
from .error_codes import ErrorCode
from .logging_utils import _crawler_event
from .models import CalendarDate
from .selectors_report import REPORT_SELECTORS, ReportSelectors
from .telemetry import RunTelemetry
from .utils import log_debug, log_line

CALENDAR_TITLE_MATCHES = """
({selector, title}) => {
    const elem = document.querySelector(selector);
    return elem !== null && (elem.textContent || '').trim() === title;
}
"""


def _forward_console(message: ConsoleMessage) -> None:
    if message.type != "warning":
        log_debug(f"[CONSOLE] {message.text}")


def open_report_page(context: BrowserContext) -> Page:
    """Open a page whose non-warning console output goes to the debug log."""

    page = context.new_page()
    page.on("console", _forward_console)
    return page


def calendar_title(month: str, year: int) -> str:
    return f"{month} {year}"


def open_calendar(
    page: Page,
    region: str,
    month: str,
    year: int,
    *,
    selectors: ReportSelectors = REPORT_SELECTORS,
) -> None:
    """Load the report form, apply the filters and wait for the calendar.

    Each dropdown change posts back, so the calendar is only trusted once its
    title reads "<Month> <Year>". That wait has no timeout.
    """

    selector_timeout = config.SELECTOR_TIMEOUT_SECONDS * 1000
    page.goto(config.BASE_URL, timeout=config.NAV_TIMEOUT_SECONDS * 1000)

    for select, value in (
        (selectors.region_select, region),
        (selectors.month_select, month),
        (selectors.year_select, str(year)),
    ):
        page.wait_for_selector(select, timeout=selector_timeout)
        page.select_option(select, value)

    page.wait_for_function(
        CALENDAR_TITLE_MATCHES,
        arg={"selector": selectors.calendar_title, "title": calendar_title(month, year)},
        timeout=config.CALENDAR_SYNC_TIMEOUT_MS,
    )


def read_day_links(
    page: Page, *, selectors: ReportSelectors = REPORT_SELECTORS
) -> Dict[int, ElementHandle]:
    """Return a fresh day-number -> link handle mapping for the loaded calendar.

    Handles do not survive navigation; call this after every page load. When a
    day number is linked twice the first cell wins, so a trailing next-month
    cell never shadows the requested month.
    """

    links: Dict[int, ElementHandle] = {}
    for handle in page.query_selector_all(selectors.day_links):
        links.setdefault(int((handle.text_content() or "").strip()), handle)
    return links


def _list_days(page: Page, selectors: ReportSelectors) -> List[int]:
    return [
        int((handle.text_content() or "").strip())
        for handle in page.query_selector_all(selectors.day_links)
    ]


def discover_dates(
    context: BrowserContext,
    region: str,
    month: str,
    year: int,
    *,
    selectors: ReportSelectors = REPORT_SELECTORS,
    telemetry: Optional[RunTelemetry] = None,
) -> List[CalendarDate]:
    """Return the dates with a report link for ``region`` in ``month``/``year``.

    Dates come back in calendar order as rendered, without de-duplication.
    Failures are logged and yield an empty list.
    """

    page: Any = None
    try:
        page = open_report_page(context)
        open_calendar(page, region, month, year, selectors=selectors)
        days = _list_days(page, selectors)
        return [CalendarDate(day=day, month=month, year=year) for day in days]
    except Exception as exc:  # noqa: BLE001
        log_line(f"[DISCOVERY] Error while getting available days for {region} {month} {year}: {exc}")
        _crawler_event(
            "error",
            phase="discovery",
            error_code=ErrorCode.DISCOVERY,
            region=region,
            month=month,
            year=year,
            error=str(exc),
        )
        if telemetry is not None:
            telemetry.add(
                ErrorCode.DISCOVERY,
                type(exc).__name__,
                {"region": region, "month": month, "year": year, "error": str(exc)},
            )
        return []
    finally:
        if page is not None:
            try:
                page.close()
            except Exception as exc:  # noqa: BLE001
                log_line(f"[DISCOVERY] Error closing page: {exc}")


__all__ = [
    "open_report_page",
    "open_calendar",
    "read_day_links",
    "discover_dates",
    "calendar_title",
]
