from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from domain.errors import StorageCorrupt
from domain.models import VerificationRecord
from domain.repositories import VerificationRepository


logger = logging.getLogger(__name__)


class JsonVerificationRepository(VerificationRepository):
    """
    Flat-file implementation of `VerificationRepository`.

    The file holds `{"verifiedUsers": [id...], "cooldowns": [[id, ms]...]}`.
    The whole snapshot is rewritten on every mutation; there is no locking
    between processes, and a malformed file is replaced by an empty store.
    """

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._records: Dict[str, VerificationRecord] = {}
        self.load_all()

    @staticmethod
    def _decode(raw: str) -> Dict[str, VerificationRecord]:
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise StorageCorrupt(str(exc)) from exc

        if not isinstance(data, dict):
            raise StorageCorrupt(f"expected an object, got {type(data).__name__}")

        verified_raw = data.get("verifiedUsers") or []
        cooldowns_raw = data.get("cooldowns") or []
        if not isinstance(verified_raw, list) or not isinstance(cooldowns_raw, list):
            raise StorageCorrupt("verifiedUsers and cooldowns must be lists")
        if any(isinstance(u, bool) or not isinstance(u, (str, int)) for u in verified_raw):
            raise StorageCorrupt("verifiedUsers must hold user IDs")

        cooldowns = {}
        for entry in cooldowns_raw:
            if not isinstance(entry, list) or len(entry) != 2:
                raise StorageCorrupt(f"cooldown entry is not a pair: {entry!r}")
            user_id, until = entry
            if isinstance(until, bool) or not isinstance(until, (int, float)):
                raise StorageCorrupt(f"cooldown for {user_id!r} is not a timestamp")
            cooldowns[str(user_id)] = int(until)

        return {
            str(user_id): VerificationRecord(
                user_id=str(user_id),
                verified=True,
                cooldown_until=cooldowns.get(str(user_id)),
            )
            for user_id in verified_raw
        }

    def _read(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageCorrupt(str(exc)) from exc

    def _encode(self) -> str:
        verified = [r.user_id for r in self._records.values() if r.verified]
        cooldowns = [
            [r.user_id, r.cooldown_until]
            for r in self._records.values()
            if r.verified and r.cooldown_until is not None
        ]
        return json.dumps({"verifiedUsers": verified, "cooldowns": cooldowns}, indent=2)

    def load_all(self) -> Dict[str, VerificationRecord]:
        if not self._path.exists():
            self._records = {}
            self.persist_all()
            return dict(self._records)

        try:
            self._records = self._decode(self._read())
        except StorageCorrupt as exc:
            logger.error("Failed to load storage from %s, resetting: %s", self._path, exc)
            self._records = {}
            self.persist_all()

        return dict(self._records)

    def persist_all(self) -> None:
        self._path.write_text(self._encode(), encoding="utf-8")

    def get(self, user_id: str) -> Optional[VerificationRecord]:
        return self._records.get(user_id)

    def put(self, record: VerificationRecord) -> None:
        self._records[record.user_id] = record
        self.persist_all()

    def delete(self, user_id: str) -> None:
        self._records.pop(user_id, None)
        self.persist_all()
