from __future__ import annotations

from typing import Dict, Optional

import psycopg2

from domain.models import VerificationRecord
from domain.repositories import VerificationRepository


class PostgresVerificationRepository(VerificationRepository):
    """
    Postgres-backed implementation of `VerificationRepository`.

    Schema (minimal):
      - user_id TEXT PRIMARY KEY  -- Discord snowflake as text
      - verified BOOLEAN
      - cooldown_until BIGINT NULL  -- epoch milliseconds
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._ensure_table()

    def _get_connection(self):
        return psycopg2.connect(self._dsn)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS verifications (
                        user_id TEXT PRIMARY KEY,
                        verified BOOLEAN NOT NULL,
                        cooldown_until BIGINT
                    )
                    """
                )
                conn.commit()

    @staticmethod
    def _to_domain(row: tuple) -> VerificationRecord:
        return VerificationRecord(
            user_id=str(row[0]),
            verified=bool(row[1]),
            cooldown_until=int(row[2]) if row[2] is not None else None,
        )

    def get(self, user_id: str) -> Optional[VerificationRecord]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT user_id, verified, cooldown_until
                    FROM verifications
                    WHERE user_id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()
                if not row:
                    return None
                return self._to_domain(row)

    def put(self, record: VerificationRecord) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO verifications (user_id, verified, cooldown_until)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (user_id)
                    DO UPDATE SET verified = EXCLUDED.verified,
                                  cooldown_until = EXCLUDED.cooldown_until
                    """,
                    (record.user_id, record.verified, record.cooldown_until),
                )
                conn.commit()

    def delete(self, user_id: str) -> None:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM verifications WHERE user_id = %s", (user_id,))
                conn.commit()

    def load_all(self) -> Dict[str, VerificationRecord]:
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT user_id, verified, cooldown_until FROM verifications")
                return {str(row[0]): self._to_domain(row) for row in cur.fetchall()}

    def persist_all(self) -> None:
        return None
