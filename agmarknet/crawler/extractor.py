"""Record extraction for rendered report tables.

The report grid is hierarchical: single-cell rows introduce a commodity group
("Group:Cereals") or a crop, and eight-cell rows carry market data. Market and
arrivals cells are only filled on the first row of a run, so blanks inherit
the nearest value above them on the same page.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from .error_codes import ExtractionError
from .models import Arrivals, CalendarDate, Record, parse_number

GROUP_PATTERN = re.compile(r"Group:\w+")
DATA_ROW_WIDTH = 8


def table_snapshot(table_html: str) -> List[List[str]]:
    """Return the body rows of a rendered table as lists of cell texts.

    ``table_html`` is the outer HTML of the results table. Cell texts are
    whitespace-stripped, so non-breaking-space fillers read as blank.
    """

    soup = BeautifulSoup(table_html or "", "html5lib")
    table = soup.find("table")
    if table is None:
        return []

    rows: List[List[str]] = []
    for body in table.find_all("tbody", recursive=False):
        for tr in body.find_all("tr", recursive=False):
            cells = tr.find_all("td", recursive=False)
            rows.append([cell.get_text(" ", strip=True) for cell in cells])
    return rows


def extract_records(
    rows: Sequence[Sequence[str]], region: str, date: CalendarDate
) -> List[Record]:
    """Build records from a table snapshot, resolving carried-forward fields.

    Rows that are neither a one-cell header nor an eight-cell data row are
    ignored. Any unparseable value raises ``ExtractionError``; no partial
    record list is returned.
    """

    records: List[Record] = []
    current_group: Optional[str] = None
    current_crop: Optional[str] = None
    current_market: Optional[str] = None
    current_arrivals: Optional[Arrivals] = None

    for index, row in enumerate(rows):
        if len(row) == 1:
            text = row[0]
            if GROUP_PATTERN.search(text):
                current_group = text
            else:
                current_crop = text
            continue

        if len(row) != DATA_ROW_WIDTH:
            continue

        market, arrivals, unit_arrival, variety, min_price, max_price, modal_price, unit_price = row
        try:
            if market != "":
                current_market = market
            if arrivals != "":
                current_arrivals = Arrivals.parse(arrivals)
            record = Record(
                region=region,
                date=date,
                group=current_group,
                crop=current_crop,
                market=current_market,
                arrivals=current_arrivals,
                unit_arrival=unit_arrival,
                variety=variety,
                min_price=parse_number(min_price),
                max_price=parse_number(max_price),
                modal_price=parse_number(modal_price),
                unit_price=unit_price,
            )
        except (TypeError, ValueError) as exc:
            raise ExtractionError(
                f"row {index} for {region} {date}: {exc}"
            ) from exc
        records.append(record)

    return records


__all__ = ["table_snapshot", "extract_records", "GROUP_PATTERN"]
