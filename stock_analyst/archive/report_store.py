"""
SQLite-backed report text store — the primary record of every archived report.

Schema
------
reports : id TEXT PK, ticker TEXT, content TEXT, created_at TEXT,
          embedding TEXT NULL (JSON array, set by the local vector index)

Usage
-----
    store = ReportStore()                    # opens/creates data/reports.db
    store.insert(report)                     # ArchivedReport
    store.recent("NVDA", limit=5)            # newest first
"""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from stock_analyst.core.protocol import ArchivedReport

# Store the DB at the repository root in a data/ directory
_DEFAULT_DB = Path(__file__).resolve().parents[2] / "data" / "reports.db"


class ReportStore:
    """SQLite report store.  Rows are written once and never updated except
    for attaching an embedding to a row that has none."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path or _DEFAULT_DB)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    # ── schema ────────────────────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")  # concurrent readers across runs
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS reports (
                    id          TEXT PRIMARY KEY,
                    ticker      TEXT NOT NULL,
                    content     TEXT NOT NULL,
                    created_at  TEXT NOT NULL,
                    embedding   TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_reports_ticker
                    ON reports(ticker, created_at);
            """)

    @staticmethod
    def _to_report(row: sqlite3.Row) -> ArchivedReport:
        return ArchivedReport(
            id=row["id"],
            ticker=row["ticker"],
            content=row["content"],
            created_at=datetime.fromisoformat(row["created_at"]),
            embedding=json.loads(row["embedding"]) if row["embedding"] else None,
        )

    # ── public API ────────────────────────────────────────────────────────────

    def insert(self, report: ArchivedReport) -> None:
        """Persist *report*; raises sqlite3.IntegrityError on a duplicate id."""
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO reports (id, ticker, content, created_at, embedding) VALUES (?,?,?,?,?)",
                (
                    report.id,
                    report.ticker,
                    report.content,
                    report.created_at.isoformat(timespec="microseconds"),
                    json.dumps(report.embedding) if report.embedding is not None else None,
                ),
            )

    def attach_embedding(self, report_id: str, embedding: Sequence[float]) -> bool:
        """
        Store *embedding* on a row that has none yet.
        Returns False when the row does not exist or is already indexed.
        """
        with self._connect() as conn:
            cur = conn.execute(
                "UPDATE reports SET embedding = ? WHERE id = ? AND embedding IS NULL",
                (json.dumps([float(v) for v in embedding]), report_id),
            )
        return cur.rowcount == 1

    def get(self, report_id: str) -> Optional[ArchivedReport]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM reports WHERE id = ?", (report_id,)).fetchone()
        return self._to_report(row) if row else None

    def get_many(self, report_ids: Sequence[str]) -> List[ArchivedReport]:
        """Return the reports for *report_ids* in the order given, skipping unknown ids."""
        if not report_ids:
            return []
        placeholders = ",".join("?" for _ in report_ids)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM reports WHERE id IN ({placeholders})", tuple(report_ids)
            ).fetchall()
        by_id = {r["id"]: self._to_report(r) for r in rows}
        return [by_id[i] for i in report_ids if i in by_id]

    def recent(self, ticker: str, limit: int = 5) -> List[ArchivedReport]:
        """Return the newest *limit* reports for *ticker*, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM reports
                WHERE ticker = ?
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (ticker, limit),
            ).fetchall()
        return [self._to_report(r) for r in rows]

    def indexed(self, ticker: Optional[str] = None) -> List[ArchivedReport]:
        """Return every report that carries an embedding, optionally for one ticker."""
        query = "SELECT * FROM reports WHERE embedding IS NOT NULL"
        params: tuple = ()
        if ticker:
            query += " AND ticker = ?"
            params = (ticker,)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._to_report(r) for r in rows]

    def count(self, ticker: Optional[str] = None) -> int:
        with self._connect() as conn:
            if ticker:
                row = conn.execute("SELECT COUNT(*) AS cnt FROM reports WHERE ticker = ?", (ticker,)).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) AS cnt FROM reports").fetchone()
        return row["cnt"] if row else 0

    def list_tickers(self) -> List[str]:
        """Return all tickers with at least one report, alphabetically."""
        with self._connect() as conn:
            rows = conn.execute("SELECT DISTINCT ticker FROM reports ORDER BY ticker").fetchall()
        return [r["ticker"] for r in rows]
