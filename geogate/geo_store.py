# geogate/geo_store.py
"""
Read-only query layer over the world geo dataset (SQLite).

The dataset is produced by an external pipeline and never written here:
- opened with mode=ro
- one short-lived connection per query, run on a worker thread
- any sqlite error surfaces as StoreUnavailable (no retries)
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any, Callable, List, Sequence, TypeVar

from pydantic import ValidationError as ModelValidationError

from geogate.errors import NotFoundError, StoreUnavailable, ValidationError
from geogate.models import City, Country

log = logging.getLogger(__name__)

T = TypeVar("T")

MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 1000

_COUNTRY_COLUMNS = ("country_code", "country_name")

_CITY_COLUMNS = """
    name AS city,
    latitude,
    longitude,
    population,
    country_code
"""


def _casefold(value: Any) -> str:
    return str(value or "").casefold()


def _row_to_country(row: sqlite3.Row) -> Country:
    data = dict(row)
    extra = {k: v for k, v in data.items() if k not in _COUNTRY_COLUMNS}
    return Country(code=data["country_code"], name=data["country_name"], extra=extra)


def _row_to_city(row: sqlite3.Row) -> City:
    return City(
        name=row["city"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        population=row["population"],
        country_code=row["country_code"],
    )


def _map_rows(rows: Sequence[sqlite3.Row], mapper: Callable[[sqlite3.Row], T]) -> List[T]:
    """Rows that break the model mean a corrupt dataset, not a client error."""
    try:
        return [mapper(r) for r in rows]
    except ModelValidationError as e:
        log.error("Geo dataset row failed validation (%s errors)", e.error_count())
        raise StoreUnavailable(f"Corrupt dataset row: {e.error_count()} invalid field(s)") from e


class GeoStore:
    def __init__(self, db_path: str):
        self.db_path = Path(db_path)

    # -----------------------------
    # Low-level access
    # -----------------------------
    def _connect(self) -> sqlite3.Connection:
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row
        # Unicode-aware case folding; sqlite's lower()/LIKE only fold ASCII
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    def _fetch_all_sync(self, query: str, args: Sequence[Any]) -> List[sqlite3.Row]:
        try:
            conn = self._connect()
            try:
                return conn.execute(query, tuple(args)).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            log.error("Geo dataset query failed: %s", type(e).__name__)
            raise StoreUnavailable(f"Query failed: {e}") from e

    async def fetch_all(self, query: str, args: Sequence[Any] = ()) -> List[sqlite3.Row]:
        return await asyncio.to_thread(self._fetch_all_sync, query, args)

    # -----------------------------
    # Countries
    # -----------------------------
    async def list_countries(self) -> List[Country]:
        rows = await self.fetch_all(
            "SELECT * FROM countries ORDER BY country_name ASC, country_code ASC"
        )
        return _map_rows(rows, _row_to_country)

    async def get_country(self, code: str) -> Country:
        """Exact-match lookup; callers normalise the code to uppercase."""
        rows = await self.fetch_all(
            "SELECT * FROM countries WHERE country_code = ?", [code]
        )
        if not rows:
            raise NotFoundError(f"Country with code '{code}' not found")
        return _map_rows(rows[:1], _row_to_country)[0]

    # -----------------------------
    # Cities
    # -----------------------------
    async def list_cities_by_country(self, code: str) -> List[City]:
        """
        Cities of one country, most populous first.
        Unknown country -> NotFoundError; known country without cities -> [].
        """
        await self.get_country(code)

        rows = await self.fetch_all(
            f"""
            SELECT {_CITY_COLUMNS}
            FROM cities
            WHERE country_code = ?
            ORDER BY population DESC, name ASC, rowid ASC
            """,
            [code],
        )
        return _map_rows(rows, _row_to_city)

    async def search_cities_by_name(self, fragment: str, limit: int) -> List[City]:
        if not fragment or not fragment.strip():
            raise ValidationError("City name is required")
        if isinstance(limit, bool) or not isinstance(limit, int) \
                or not MIN_SEARCH_LIMIT <= limit <= MAX_SEARCH_LIMIT:
            raise ValidationError(
                f"Limit must be a number between {MIN_SEARCH_LIMIT} and {MAX_SEARCH_LIMIT}"
            )

        # instr() keeps % and _ in the fragment literal, unlike LIKE
        rows = await self.fetch_all(
            f"""
            SELECT {_CITY_COLUMNS}
            FROM cities
            WHERE instr(casefold(name), ?) > 0
            ORDER BY population DESC, name ASC, rowid ASC
            LIMIT ?
            """,
            [fragment.strip().casefold(), limit],
        )
        return _map_rows(rows, _row_to_city)
