from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Dict, List, Optional, Tuple

import pytest
from playwright.sync_api import TimeoutError as PWTimeout

from agmarknet.crawler import config, discovery
from agmarknet.crawler.discovery import discover_dates, read_day_links
from agmarknet.crawler.models import CalendarDate
from agmarknet.crawler.selectors_report import REPORT_SELECTORS
from agmarknet.crawler.telemetry import RunTelemetry
from tests.test_status_store import _configure_temp_paths

MonthKey = Tuple[str, str, int]
DayKey = Tuple[str, int, str, int]


class FakeSite:
    """In-memory stand-in for the report form's behaviour."""

    def __init__(
        self,
        days: Optional[Dict[MonthKey, List[int]]] = None,
        tables: Optional[Dict[DayKey, str]] = None,
        no_report: Tuple[DayKey, ...] = (),
        broken_calendars: Tuple[MonthKey, ...] = (),
        hidden_links: Tuple[DayKey, ...] = (),
    ) -> None:
        self.days = days or {}
        self.tables = tables or {}
        self.no_report = set(no_report)
        self.broken_calendars = set(broken_calendars)
        # Days listed during discovery but gone by the time the date is crawled.
        self.hidden_links = set(hidden_links)
        self.pages: List["FakePage"] = []
        self.listed: set = set()


class FakeHandle:
    def __init__(self, page: "FakePage", day: int) -> None:
        self.page = page
        self.day = day

    def text_content(self) -> str:
        return f" {self.day} "

    def click(self) -> None:
        self.page.clicked_day = self.day


class FakePage:
    def __init__(self, site: FakeSite) -> None:
        self.site = site
        self.filters: Dict[str, str] = {}
        self.visited: List[str] = []
        self.clicked_day: Optional[int] = None
        self.submitted = False
        self.closed = False
        self.listeners: Dict[str, List] = {}

    def _month_key(self) -> MonthKey:
        return (
            self.filters[REPORT_SELECTORS.region_select],
            self.filters[REPORT_SELECTORS.month_select],
            int(self.filters[REPORT_SELECTORS.year_select]),
        )

    def _day_key(self) -> DayKey:
        region, month, year = self._month_key()
        return (region, self.clicked_day, month, year)

    def on(self, event: str, handler) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def goto(self, url: str, **kwargs) -> None:
        self.visited.append(url)

    def wait_for_selector(self, selector: str, timeout: Optional[float] = None, **kwargs) -> None:
        if selector == REPORT_SELECTORS.submit_button:
            assert timeout == config.REPORT_BUTTON_TIMEOUT_SECONDS * 1000
            if self.clicked_day is None or self._day_key() in self.site.no_report:
                raise PWTimeout(f"Timeout {timeout}ms exceeded.")
        if selector == REPORT_SELECTORS.results_table:
            assert self.submitted
            assert timeout == 0

    def select_option(self, selector: str, value: str) -> None:
        self.filters[selector] = value

    def wait_for_function(self, expression: str, arg=None, timeout=None, **kwargs) -> None:
        assert timeout == 0
        if self._month_key() in self.site.broken_calendars:
            raise PWTimeout("calendar never showed the requested month")
        region, month, year = self._month_key()
        assert arg["title"] == f"{month} {year}"
        assert arg["selector"] == REPORT_SELECTORS.calendar_title

    def query_selector_all(self, selector: str) -> List[FakeHandle]:
        assert selector == REPORT_SELECTORS.day_links
        region, month, year = self._month_key()
        first_listing = self._month_key() not in self.site.listed
        self.site.listed.add(self._month_key())
        handles = []
        for day in self.site.days.get(self._month_key(), []):
            if first_listing or (region, day, month, year) not in self.site.hidden_links:
                handles.append(FakeHandle(self, day))
        return handles

    def click(self, selector: str) -> None:
        assert selector == REPORT_SELECTORS.submit_button
        self.submitted = True

    def eval_on_selector(self, selector: str, expression: str) -> str:
        assert selector == REPORT_SELECTORS.results_table
        return self.site.tables.get(self._day_key(), "<table><tbody></tbody></table>")

    def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, site: FakeSite) -> None:
        self.site = site

    def new_page(self) -> FakePage:
        page = FakePage(self.site)
        self.site.pages.append(page)
        return page


def test_discover_dates_returns_days_in_ui_order(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    site = FakeSite(days={("Punjab", "March", 2016): [4, 1, 3, 3]})

    dates = discover_dates(FakeContext(site), "Punjab", "March", 2016)

    assert dates == [
        CalendarDate(4, "March", 2016),
        CalendarDate(1, "March", 2016),
        CalendarDate(3, "March", 2016),
        CalendarDate(3, "March", 2016),
    ]
    assert len(site.pages) == 1
    page = site.pages[0]
    assert page.closed
    assert page.visited == [config.BASE_URL]
    assert page.filters == {
        REPORT_SELECTORS.region_select: "Punjab",
        REPORT_SELECTORS.month_select: "March",
        REPORT_SELECTORS.year_select: "2016",
    }


def test_discover_dates_empty_month(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    site = FakeSite()

    assert discover_dates(FakeContext(site), "Goa", "July", 2015) == []
    assert site.pages[0].closed


def test_discover_dates_swallows_calendar_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    site = FakeSite(
        days={("Punjab", "March", 2016): [1, 2]},
        broken_calendars=(("Punjab", "March", 2016),),
    )
    telemetry = RunTelemetry()
    events = []
    monkeypatch.setattr(discovery, "_crawler_event", lambda *args, **fields: events.append(fields))

    dates = discover_dates(FakeContext(site), "Punjab", "March", 2016, telemetry=telemetry)

    assert dates == []
    assert site.pages[0].closed
    assert events[-1]["error_code"] == "discovery_failed"
    assert telemetry.entries[-1]["status"] == "discovery_failed"
    assert telemetry.entries[-1]["region"] == "Punjab"


def test_discover_dates_handles_page_open_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)

    class BrokenContext:
        def new_page(self):
            raise RuntimeError("browser went away")

    assert discover_dates(BrokenContext(), "Punjab", "March", 2016) == []


def test_discover_dates_non_numeric_link(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    site = FakeSite(days={("Punjab", "March", 2016): [1]})

    class OddHandle(FakeHandle):
        def text_content(self) -> str:
            return ">"

    monkeypatch.setattr(FakePage, "query_selector_all", lambda self, selector: [OddHandle(self, 0)])

    assert discover_dates(FakeContext(site), "Punjab", "March", 2016) == []
    assert site.pages[0].closed


def test_read_day_links_maps_day_to_handle() -> None:
    site = FakeSite(days={("Punjab", "March", 2016): [1, 3]})
    page = FakeContext(site).new_page()
    page.select_option(REPORT_SELECTORS.region_select, "Punjab")
    page.select_option(REPORT_SELECTORS.month_select, "March")
    page.select_option(REPORT_SELECTORS.year_select, "2016")

    links = read_day_links(page)

    assert sorted(links) == [1, 3]
    links[3].click()
    assert page.clicked_day == 3


def test_read_day_links_keeps_first_cell_for_repeated_day() -> None:
    site = FakeSite()
    page = FakeContext(site).new_page()
    in_month = FakeHandle(page, 1)
    trailing = FakeHandle(page, 1)
    page.query_selector_all = lambda selector: [in_month, FakeHandle(page, 31), trailing]

    links = read_day_links(page)

    assert links[1] is in_month
    assert sorted(links) == [1, 31]


def test_report_pages_forward_console_to_debug_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    site = FakeSite(days={("Punjab", "March", 2016): [1]})
    debug_lines: List[str] = []
    monkeypatch.setattr(discovery, "log_debug", debug_lines.append)

    discover_dates(FakeContext(site), "Punjab", "March", 2016)

    (handler,) = site.pages[0].listeners["console"]
    handler(SimpleNamespace(type="log", text="__doPostBack fired"))
    handler(SimpleNamespace(type="warning", text="deprecated API"))
    handler(SimpleNamespace(type="error", text="Uncaught TypeError"))

    assert debug_lines == ["[CONSOLE] __doPostBack fired", "[CONSOLE] Uncaught TypeError"]
