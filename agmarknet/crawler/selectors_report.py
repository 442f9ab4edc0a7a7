from __future__ import annotations

"""Selectors for the Commodity Daily State Wise report page."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReportSelectors:
    """Selector hints for the ASP.NET report form.

    The three filter dropdowns post back and re-render the calendar; the
    calendar title cell is the only reliable signal that the postback for the
    requested month has landed.
    """

    region_select: str = "#cphBody_cboState"
    month_select: str = "#cphBody_cboMonth"
    year_select: str = "#cphBody_cboYear"
    calendar_title: str = (
        "#cphBody_Calendar1 > tbody:nth-child(1) > tr:nth-child(1) > td:nth-child(1)"
        " > table:nth-child(1) > tbody:nth-child(1) > tr:nth-child(1) > td:nth-child(1)"
    )
    day_links: str = "#cphBody_Calendar1 > tbody > tr > td > a"
    submit_button: str = "#cphBody_btnSubmit"
    results_table: str = "table#cphBody_gridRecords"


REPORT_SELECTORS = ReportSelectors()

__all__ = ["ReportSelectors", "REPORT_SELECTORS"]
