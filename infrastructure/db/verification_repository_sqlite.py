from __future__ import annotations

import sqlite3
from typing import Dict, Optional

from domain.models import VerificationRecord
from domain.repositories import VerificationRepository


class SqliteVerificationRepository(VerificationRepository):
    """
    SQLite-backed implementation of `VerificationRepository`.

    This repository owns the `verifications` table and maps rows to the
    `VerificationRecord` domain model. It is self-initialising: the table is
    created if needed. Every call commits, so `persist_all` has nothing left
    to flush.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS verifications (
                    user_id TEXT PRIMARY KEY,
                    verified INTEGER NOT NULL,
                    cooldown_until INTEGER
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> VerificationRecord:
        return VerificationRecord(
            user_id=str(row[0]),
            verified=bool(row[1]),
            cooldown_until=int(row[2]) if row[2] is not None else None,
        )

    def get(self, user_id: str) -> Optional[VerificationRecord]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT user_id, verified, cooldown_until FROM verifications WHERE user_id = ?",
                (user_id,),
            )
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def put(self, record: VerificationRecord) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT OR REPLACE INTO verifications (user_id, verified, cooldown_until)
                VALUES (?, ?, ?)
                """,
                (record.user_id, int(record.verified), record.cooldown_until),
            )
            conn.commit()

    def delete(self, user_id: str) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM verifications WHERE user_id = ?", (user_id,))
            conn.commit()

    def load_all(self) -> Dict[str, VerificationRecord]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT user_id, verified, cooldown_until FROM verifications")
            rows = cur.fetchall()
            return {str(row[0]): self._to_domain(row) for row in rows}

    def persist_all(self) -> None:
        return None
