import logging
from typing import Any
from urllib.parse import quote

from campusdesk.errors import SourceUnavailable
from campusdesk.services.http import get_json

log = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetsClient:
    """Minimal Google Sheets v4 ``values.get`` client using an API key."""

    def __init__(self, *, api_key: str | None, timeout: float = 10):
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def get_values(self, sheet_id: str, cell_range: str) -> list[list[str]]:
        """
        Return the raw cell grid for ``cell_range``.

        Raises SourceUnavailable on a malformed payload; HTTP errors
        propagate from ``raise_for_status``.
        """
        url = f"{SHEETS_API}/{sheet_id}/values/{quote(cell_range, safe='!:')}"
        data: Any = await get_json(url, params={"key": self.api_key}, timeout=self.timeout)
        if not isinstance(data, dict):
            raise SourceUnavailable("sheets", f"unexpected payload type {type(data).__name__}")

        values = data.get("values") or []
        if not isinstance(values, list):
            raise SourceUnavailable("sheets", "'values' is not a list")
        log.debug("Fetched %d rows from sheet %s (%s)", len(values), sheet_id, cell_range)
        return [[str(cell) for cell in row] for row in values if isinstance(row, list)]


def rows_as_records(values: list[list[str]]) -> list[dict[str, str]]:
    """
    Map a cell grid to dicts keyed by the lower-cased header row.

    Short rows are padded with empty strings.
    """
    if not values:
        return []
    headers = [h.strip().lower() for h in values[0]]
    records: list[dict[str, str]] = []
    for row in values[1:]:
        records.append({h: (row[i].strip() if i < len(row) else "") for i, h in enumerate(headers)})
    return records
