from __future__ import annotations

import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

_DATE_RE = re.compile(r"(\d{2}/\d{2}/\d{4})")
_CELL_NOISE = ("\xa0", "&nbsp;", " ")


def parse_csrf_token(html: str, field_name: str = "_csrf_bodet") -> Optional[str]:
    soup = BeautifulSoup(html or "", "html.parser")
    node = soup.find("input", attrs={"type": "hidden", "name": field_name})
    if node is None:
        return None
    return node.get("value") or None


def parse_hours_table(html: str) -> Dict[str, List[str]]:
    """Extract `{DD/MM/YYYY: [HH:MM, ...]}` from a portal hours page.

    Rows of `table.bordered` after the header row are read. Dates without
    any recorded time are left out.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    data: Dict[str, List[str]] = {}

    for table in soup.select("table.bordered"):
        for row in _direct_rows(table)[1:]:
            date = _row_date(row)
            if not date:
                continue

            times = [t for t in (_clean(cell.get_text()) for cell in row.select('table[width="100%"] td[width="*"]')) if t]
            if times:
                data[date] = times

    return data


def _direct_rows(table: Tag) -> List[Tag]:
    rows = table.find_all("tr", recursive=False)
    for section in table.find_all(["thead", "tbody"], recursive=False):
        rows.extend(section.find_all("tr", recursive=False))
    return rows


def _row_date(row: Tag) -> Optional[str]:
    cell = row.select_one('a[onclick*="fcAfficherBadgeagesJour"]')
    if cell is None:
        first = row.find("td", recursive=False)
        if first is not None and first.find("a") is None:
            cell = first
    if cell is None:
        return None

    match = _DATE_RE.search(cell.get_text())
    return match.group(1) if match else None


def _clean(text: str) -> str:
    text = (text or "").strip()
    for noise in _CELL_NOISE:
        text = text.replace(noise, "")
    return text.strip()
