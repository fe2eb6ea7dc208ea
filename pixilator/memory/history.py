"""Bounded, client-local generation history.

Purpose of this abstraction:
    Keep the most recent generations a client produced, newest first, in a JSON
    file stored under a fixed key (`pixilator_history.json`) so the list survives
    restarts of the CLI client.

Retention:
    - At most `MAX_CACHED_ITEMS` items; older entries are silently dropped.
    - Items older than `CACHE_EXPIRY_DAYS` are dropped when the file is loaded.

Failure handling:
    A missing or corrupt file loads as an empty history (logged). Write failures
    are logged; the in-memory list stays updated.

Thread safety:
    All reads and writes of the buffer happen under `self._lock`.
"""

import json
import logging
import os
import threading
from datetime import datetime, timedelta, timezone

from pixilator.core.schemas import GenerationHistoryItem, GenerationRecord


logger = logging.getLogger(__name__)


HISTORY_KEY = "pixilator_history"
MAX_CACHED_ITEMS = 10
CACHE_EXPIRY_DAYS = 30
HISTORY_DIR = os.getenv("PIXILATOR_HISTORY_DIR", os.path.join(os.path.expanduser("~"), ".pixilator"))


def default_history_path() -> str:
    return os.path.join(HISTORY_DIR, f"{HISTORY_KEY}.json")


def _parse_timestamp(value: str):
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GenerationHistory:
    """Newest-first list of `GenerationHistoryItem`, mirrored to a JSON file."""

    def __init__(self, path: str | None = None, max_items: int = MAX_CACHED_ITEMS,
                 expiry_days: int = CACHE_EXPIRY_DAYS, clock=None):
        self.path = path or default_history_path()
        self.max_items = max_items
        self.expiry = timedelta(days=expiry_days)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._items: list[GenerationHistoryItem] = self._load_from_disk()

    def _is_expired(self, item: GenerationHistoryItem) -> bool:
        created = _parse_timestamp(item.created_at)
        if created is None:
            return False
        return self._clock() - created > self.expiry

    def _load_from_disk(self) -> list[GenerationHistoryItem]:
        if not os.path.exists(self.path):
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except Exception:
            logger.exception("Error loading history from %s", self.path)
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring history file %s: expected a list", self.path)
            return []

        items = []
        for entry in data:
            try:
                item = GenerationHistoryItem.model_validate(entry)
            except Exception:
                logger.warning("Skipping malformed history entry in %s", self.path)
                continue
            if not self._is_expired(item):
                items.append(item)

        return items[: self.max_items]

    def _write(self) -> None:
        payload = [item.model_dump(by_alias=True) for item in self._items]
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            tmp_path = self.path + ".tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            logger.exception("Failed to persist history to %s", self.path)

    def items(self) -> list[GenerationHistoryItem]:
        with self._lock:
            return list(self._items)

    def add(self, response: GenerationRecord) -> GenerationHistoryItem:
        """Prepend a generation, truncating the list to `max_items`."""
        item = GenerationHistoryItem.from_response(response)
        with self._lock:
            self._items.insert(0, item)
            del self._items[self.max_items:]
            self._write()
        return item

    def clear(self) -> None:
        with self._lock:
            self._items = []
            try:
                if os.path.exists(self.path):
                    os.remove(self.path)
            except OSError:
                logger.exception("Failed to remove history file %s", self.path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
