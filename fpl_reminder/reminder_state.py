import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, Protocol


logger = logging.getLogger(__name__)


def reminder_key(gameweek_id: int, window: float) -> str:
    """Ledger key for one (gameweek, window) pair, e.g. ``15_48h``."""

    return f"{gameweek_id}_{window:g}h"


class ReminderLedger(Protocol):
    def has(self, key: str) -> bool: ...

    def record(self, key: str, sent_at: datetime) -> None: ...


class InMemoryLedger:
    """Dict-backed ledger, used where nothing should touch the disk."""

    def __init__(self, entries: Dict[str, str] | None = None):
        self.entries: Dict[str, str] = dict(entries or {})

    def has(self, key: str) -> bool:
        return key in self.entries

    def record(self, key: str, sent_at: datetime) -> None:
        self.entries[key] = sent_at.isoformat()


class JsonFileLedger:
    """Track which reminders have already been sent to avoid duplicates.

    The whole file is re-read on every query and rewritten on every record,
    so there is no in-memory state to go stale between scheduler ticks.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable reminder ledger %s: %s", self.path, exc, extra={"ledger_path": str(self.path)})
            return {}
        if not isinstance(data, dict):
            logger.warning(
                "Ignoring reminder ledger %s: expected a JSON object, got %s",
                self.path,
                type(data).__name__,
                extra={"ledger_path": str(self.path)},
            )
            return {}
        return data

    def _persist(self, state: Dict[str, str]) -> None:
        # Write beside the ledger and swap it in, so a failed write never truncates it.
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
        ) as handle:
            tmp_path = Path(handle.name)
            try:
                json.dump(state, handle, indent=2)
            except BaseException:
                handle.close()
                tmp_path.unlink(missing_ok=True)
                raise
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def has(self, key: str) -> bool:
        return key in self.load()

    def record(self, key: str, sent_at: datetime) -> None:
        state = self.load()
        state[key] = sent_at.isoformat()
        self._persist(state)
