"""Playwright-based crawler for agmarknet daily state-wise commodity reports.

Workflow:

- Load data/status.json (dates already harvested per state).
- For each state, year and month, open the report form, select the filters
  and wait for the ASP.NET calendar to show the requested month.
- Read the day links the calendar renders; every linked day has a report.
- For each day not yet harvested, reload the form, click the day, wait for
  the "view report" button, submit and snapshot the results grid.
- Parse the grid into records, append them to data/crop_data_<year>.csv,
  mark the date done and rewrite the status file.

A date that is skipped or fails stays out of the status file and is retried
on the next run; there are no in-run retries.
"""

from __future__ import annotations

import argparse
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence

from playwright.sync_api import (
    BrowserContext,
    Page,
    TimeoutError as PWTimeout,
    sync_playwright,
)

from . import config
from .config_validation import validate_runtime_config
from .discovery import discover_dates, open_calendar, open_report_page, read_day_links
from .error_codes import (
    DateOutcome,
    DayLinkMissing,
    ErrorCode,
    ExtractionError,
    ReportUnavailable,
)
from .extractor import extract_records, table_snapshot
from .logging_utils import _crawler_event
from .models import CalendarDate, Record
from .selectors_report import REPORT_SELECTORS, ReportSelectors
from .sink import YearlyCsvSink
from .status_store import StatusStore
from .telemetry import RunTelemetry
from .utils import ensure_dirs, log_line, save_json_file, setup_run_logger

OUTER_HTML = "el => el.outerHTML"


def _short_error_message(exc: BaseException, max_length: int = 200) -> str:
    message = f"{type(exc).__name__}: {exc}"
    if len(message) > max_length:
        return message[: max_length - 3] + "..."
    return message


class Crawler:
    """Drive the per-date state machine over a shared browser context."""

    def __init__(
        self,
        context: BrowserContext,
        store: StatusStore,
        sink: YearlyCsvSink,
        *,
        selectors: ReportSelectors = REPORT_SELECTORS,
        telemetry: Optional[RunTelemetry] = None,
    ) -> None:
        self.context = context
        self.store = store
        self.sink = sink
        self.selectors = selectors
        self.telemetry = telemetry or RunTelemetry()
        self.summary: Dict[str, int] = {
            "discovered": 0,
            "already_done": 0,
            "completed": 0,
            "skipped_no_link": 0,
            "skipped_no_report": 0,
            "failed": 0,
            "records_written": 0,
        }

    # ------------------------------------------------------------------
    # Single date
    # ------------------------------------------------------------------

    def _fetch_records(self, page: Page, region: str, date: CalendarDate) -> List[Record]:
        selectors = self.selectors
        open_calendar(page, region, date.month, date.year, selectors=selectors)

        link = read_day_links(page, selectors=selectors).get(date.day)
        if link is None:
            raise DayLinkMissing(f"no calendar link for day {date.day}")
        link.click()

        try:
            page.wait_for_selector(
                selectors.submit_button,
                timeout=config.REPORT_BUTTON_TIMEOUT_SECONDS * 1000,
            )
        except PWTimeout as exc:
            raise ReportUnavailable(str(exc)) from exc

        page.click(selectors.submit_button)
        page.wait_for_selector(selectors.results_table, timeout=config.RESULTS_TABLE_TIMEOUT_MS)
        table_html = page.eval_on_selector(selectors.results_table, OUTER_HTML)
        return extract_records(table_snapshot(table_html), region, date)

    def crawl_date(self, region: str, date: CalendarDate) -> DateOutcome:
        """Attempt one (region, date) and persist it when it succeeds."""

        log_line(f"Getting data for {date} for state: {region}")
        started = time.perf_counter()
        page: Any = None
        records: Optional[List[Record]] = None
        outcome = DateOutcome.FAILED
        error_code: Optional[str] = None
        error: Optional[str] = None

        try:
            page = open_report_page(self.context)
            records = self._fetch_records(page, region, date)
        except DayLinkMissing as exc:
            outcome, error_code, error = DateOutcome.SKIPPED_NO_LINK, ErrorCode.NO_LINK, str(exc)
        except ReportUnavailable as exc:
            log_line(f"Unable to find data for {region} {date}")
            outcome, error_code, error = DateOutcome.SKIPPED_NO_REPORT, ErrorCode.NO_REPORT, str(exc)
        except ExtractionError as exc:
            outcome, error_code, error = DateOutcome.FAILED, ErrorCode.EXTRACTION, str(exc)
        except Exception as exc:  # noqa: BLE001
            log_line(f"Error while crawling for {region} {date}: {exc}")
            outcome, error_code, error = (
                DateOutcome.FAILED,
                ErrorCode.NAVIGATION,
                _short_error_message(exc),
            )
        finally:
            if page is not None:
                try:
                    page.close()
                except Exception as exc:  # noqa: BLE001
                    log_line(f"Error closing page for {region} {date}: {exc}")

        written = 0
        if records is not None:
            written = self.sink.append(date.year, records)
            self.store.mark_done(region, date)
            self.store.save()
            outcome = DateOutcome.COMPLETED
            self.summary["records_written"] += written

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        self.summary[outcome.value] += 1
        if outcome.is_skip:
            label = "skip"
        elif outcome is DateOutcome.FAILED:
            label = "error"
        else:
            label = "date"
        _crawler_event(
            label,
            phase="crawl_date",
            outcome=outcome,
            error_code=error_code,
            region=region,
            date=date,
            records=written,
            elapsed_ms=elapsed_ms,
            error=error,
        )
        self.telemetry.add(
            outcome.value,
            error_code or "ok",
            {
                "region": region,
                "day": date.day,
                "month": date.month,
                "year": date.year,
                "records": written,
                "elapsed_ms": elapsed_ms,
                "error": error,
            },
        )
        return outcome

    # ------------------------------------------------------------------
    # Outer loop
    # ------------------------------------------------------------------

    def crawl_month(self, region: str, month: str, year: int) -> None:
        log_line(f"Getting valid days for month: {month} {year} for state: {region}")
        dates = discover_dates(
            self.context,
            region,
            month,
            year,
            selectors=self.selectors,
            telemetry=self.telemetry,
        )
        log_line(f"Found {len(dates)} days for {month} {year} for state: {region}")
        self.summary["discovered"] += len(dates)

        for date in dates:
            if self.store.is_done(region, date):
                self.summary["already_done"] += 1
                continue
            self.crawl_date(region, date)

        self.store.save()

    def run(
        self,
        regions: Sequence[str] = config.REGIONS,
        years: Sequence[int] = config.YEARS,
        months: Sequence[str] = config.MONTHS,
    ) -> Dict[str, int]:
        for region in regions:
            for year in years:
                log_line(f"Crawling {region} {year}...")
                for month in months:
                    self.crawl_month(region, month, year)
        return dict(self.summary)


def run_crawl(
    regions: Optional[Iterable[str]] = None,
    years: Optional[Iterable[int]] = None,
    months: Optional[Iterable[str]] = None,
    *,
    headless: Optional[bool] = None,
    entrypoint: str = "cli",
) -> Dict[str, Any]:
    """Public entrypoint: load progress, launch Chromium and crawl."""

    ensure_dirs()
    log_path = setup_run_logger()

    region_list = list(regions) if regions else list(config.REGIONS)
    year_list = list(years) if years else list(config.YEARS)
    month_list = list(months) if months else list(config.MONTHS)
    validate_runtime_config(entrypoint, regions=region_list, years=year_list, months=month_list)

    # Keep the fixed orders regardless of how the selection was given.
    region_list = [region for region in config.REGIONS if region in region_list]
    month_list = [month for month in config.MONTHS if month in month_list]
    year_list = sorted(set(year_list))

    store = StatusStore.load(config.STATUS_FILE)
    sink = YearlyCsvSink()
    telemetry = RunTelemetry(mode="crawl")
    summary: Dict[str, Any] = {}

    _crawler_event(
        "plan",
        run_id=telemetry.run_id,
        regions=len(region_list),
        years=year_list,
        months=len(month_list),
        already_completed=store.total_completed(),
    )

    try:
        log_line("Setting up Browser...")
        with sync_playwright() as pw:
            browser = pw.chromium.launch(
                headless=config.HEADLESS if headless is None else headless,
            )
            try:
                context = browser.new_context(user_agent=config.USER_AGENT, locale="en-US")
                crawler = Crawler(context, store, sink, telemetry=telemetry)
                summary.update(crawler.run(region_list, year_list, month_list))
            finally:
                store.save()
                log_line("Closing Browser...")
                try:
                    browser.close()
                except Exception as exc:  # noqa: BLE001
                    log_line(f"Error closing browser: {exc}")
    finally:
        summary["run_id"] = telemetry.run_id
        summary["log_file"] = str(log_path)
        summary["telemetry_file"] = str(telemetry.finalize(extra={"counts": dict(summary)}))

    try:
        save_json_file(config.SUMMARY_FILE, summary)
    except OSError as exc:
        log_line(f"[RUN][WARN] Unable to write summary: {exc}")

    log_line(
        f"Crawl finished. Completed={summary.get('completed', 0)}, "
        f"Skipped={summary.get('skipped_no_link', 0) + summary.get('skipped_no_report', 0)}, "
        f"Failed={summary.get('failed', 0)}, "
        f"Records={summary.get('records_written', 0)}"
    )
    return summary


def _cli_entrypoint(argv: Optional[List[str]] = None) -> None:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Crawl agmarknet daily state-wise reports")
    parser.add_argument(
        "--region",
        dest="regions",
        action="append",
        default=None,
        help="State to crawl; repeat for several. Defaults to all states.",
    )
    parser.add_argument("--year", dest="years", type=int, action="append", default=None)
    parser.add_argument("--month", dest="months", action="append", default=None)
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    args = parser.parse_args(argv)

    run_crawl(
        regions=args.regions,
        years=args.years,
        months=args.months,
        headless=False if args.headful else None,
    )


if __name__ == "__main__":  # pragma: no cover
    _cli_entrypoint()

__all__ = ["Crawler", "run_crawl", "_cli_entrypoint"]
