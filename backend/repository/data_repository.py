"""Repository layer responsible for all bid store access."""

from __future__ import annotations

import json
import sqlite3
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from backend.domain.models import Bid
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class BidStoreError(Exception):
    """Raised when the bid set cannot be loaded or persisted."""


_DEMO_BIDS: tuple[tuple[str, str, int, str, tuple[str, ...]], ...] = (
    ("jmartin", "J. Martin", 4, "ORD", ("2026-07-03", "2026-07-04", "2026-07-05")),
    ("akim", "A. Kim", 1, "ORD", ("2026-07-04", "2026-12-24", "2026-12-25")),
    ("rpatel", "R. Patel", 7, "ORD", ("2026-07-04", "2026-12-25")),
    ("lnguyen", "L. Nguyen", 2, "ORD", ("2026-07-04", "2026-08-14")),
    ("sgarcia", "S. Garcia", 3, "DEN", ("2026-03-16", "2026-03-17", "2026-03-18")),
    ("tobrien", "T. O'Brien", 5, "DEN", ("2026-03-17", "2026-11-26")),
)


def _encode_dates(dates: Iterable[date]) -> str:
    return json.dumps([day.isoformat() for day in dates])


def _decode_dates(raw: str) -> tuple[date, ...]:
    return tuple(date.fromisoformat(value) for value in json.loads(raw))


def _row_to_bid(row: sqlite3.Row) -> Bid:
    return Bid(
        requester_id=str(row["requester_id"]),
        display_name=str(row["name"]),
        seniority=int(row["seniority"]),
        location=str(row["location"]),
        requested_dates=_decode_dates(str(row["vacation_dates"])),
    )


class DataRepository:
    """Encapsulates SQLite access so allocation logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bids (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        requester_id TEXT NOT NULL,
                        name TEXT NOT NULL,
                        seniority INTEGER NOT NULL,
                        location TEXT NOT NULL,
                        vacation_dates TEXT NOT NULL,
                        submitted_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        UNIQUE (requester_id, location)
                    );
                    """
                )
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS AllocationRunLogs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        year INTEGER NOT NULL,
                        bid_count INTEGER NOT NULL,
                        grant_count INTEGER NOT NULL,
                        unaccommodated_count INTEGER NOT NULL,
                        ran_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def upsert_bid(self, bid: Bid) -> None:
        """Store ``bid``, replacing any earlier one for the same requester/location.

        The replacement is re-inserted so it moves to the end of store order.
        """
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM Bids WHERE requester_id = ? AND location = ?;",
                    (bid.requester_id, bid.location),
                )
                cursor.execute(
                    """
                    INSERT INTO Bids (requester_id, name, seniority, location, vacation_dates)
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    (
                        bid.requester_id,
                        bid.display_name,
                        bid.seniority,
                        bid.location,
                        _encode_dates(bid.requested_dates),
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise BidStoreError(f"Failed to save bid: {exc}") from exc

    def get_bid(self, requester_id: str, location: str) -> Optional[Bid]:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT requester_id, name, seniority, location, vacation_dates
                    FROM Bids
                    WHERE requester_id = ? AND location = ?;
                    """,
                    (requester_id, location),
                )
                row = cursor.fetchone()
        except sqlite3.Error as exc:
            raise BidStoreError(f"Failed to load bid: {exc}") from exc
        if row is None:
            return None
        return _row_to_bid(row)

    def list_bids(self) -> list[Bid]:
        """Return every stored bid in store order."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    SELECT requester_id, name, seniority, location, vacation_dates
                    FROM Bids
                    ORDER BY id ASC;
                    """
                )
                return [_row_to_bid(row) for row in cursor.fetchall()]
        except (sqlite3.Error, ValueError) as exc:
            raise BidStoreError(f"Failed to load bids: {exc}") from exc

    def replace_bids(
        self,
        bids: Iterable[Bid],
        *,
        year: int,
        grant_count: int,
        unaccommodated_count: int,
    ) -> None:
        """Overwrite the bid set and log the run in one transaction.

        Bids keep the given order. If either write fails nothing is committed.
        """
        rows = [
            (
                bid.requester_id,
                bid.display_name,
                bid.seniority,
                bid.location,
                _encode_dates(bid.requested_dates),
            )
            for bid in bids
        ]
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM Bids;")
                cursor.executemany(
                    """
                    INSERT INTO Bids (requester_id, name, seniority, location, vacation_dates)
                    VALUES (?, ?, ?, ?, ?);
                    """,
                    rows,
                )
                cursor.execute(
                    """
                    INSERT INTO AllocationRunLogs (year, bid_count, grant_count, unaccommodated_count)
                    VALUES (?, ?, ?, ?);
                    """,
                    (year, len(rows), grant_count, unaccommodated_count),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise BidStoreError(f"Failed to persist allocation results: {exc}") from exc

    def count_bids(self) -> int:
        return self._count("Bids")

    def count_allocation_runs(self) -> int:
        return self._count("AllocationRunLogs")

    def _count(self, table: str) -> int:
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT COUNT(*) AS count FROM {table};")
                return int(cursor.fetchone()["count"])
        except sqlite3.Error as exc:
            raise BidStoreError(f"Failed to count {table}: {exc}") from exc

    def seed_demo_bids_if_empty(self) -> int:
        """Insert a small demo bid set when the store is empty; return rows added."""
        if self.count_bids() > 0:
            logger.info("Bids already present; skipping demo seed")
            return 0
        for requester_id, name, seniority, location, dates in _DEMO_BIDS:
            self.upsert_bid(
                Bid(
                    requester_id=requester_id,
                    display_name=name,
                    seniority=seniority,
                    location=location,
                    requested_dates=tuple(date.fromisoformat(value) for value in dates),
                )
            )
        logger.info("Demo bid seed completed with %s bids", len(_DEMO_BIDS))
        return len(_DEMO_BIDS)
