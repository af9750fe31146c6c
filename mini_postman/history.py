import json
import logging
import os
import shutil
import time
import warnings
from typing import List, Optional, Tuple

from .errors import PersistenceWarning
from .models import HistoryItem, HttpRequest, HttpResponse
from .settings import DEFAULT_SETTINGS, config_dir

log = logging.getLogger(__name__)

MAX_HISTORY_ITEMS = 50


def _warn(message: str):
    warnings.warn(message, PersistenceWarning, stacklevel=3)


class RequestHistory:
    """Most-recent-first list of completed requests, capped at ``limit`` items.

    Kept in memory only; :class:`HistoryStore` adds the file behind it.
    """
    def __init__(self, limit: int = MAX_HISTORY_ITEMS):
        self.limit = limit
        self._items: List[HistoryItem] = []

    def add(self, request: HttpRequest, response: HttpResponse) -> HistoryItem:
        item = HistoryItem(request=request, response=response, timestamp=int(time.time()))
        self._items.insert(0, item)
        del self._items[self.limit:]
        self._persist()
        return item

    def get(self, index: int) -> Optional[HistoryItem]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def clear(self):
        self._items = []
        self._persist()

    def load(self):
        pass

    def items(self) -> Tuple[HistoryItem, ...]:
        return tuple(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self.items())

    def _persist(self):
        pass


class HistoryStore(RequestHistory):
    def __init__(self, path: str = None, limit: int = MAX_HISTORY_ITEMS):
        super().__init__(limit)
        self.path = os.fspath(path) if path else os.path.join(config_dir(), DEFAULT_SETTINGS["history_file"])
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        except OSError as e:
            _warn(f"Could not create history directory for {self.path}: {e}")
        self.load()

    def load(self):
        self._items = []
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            _warn(f"Could not read history file {self.path}: {e}")
            return
        except (ValueError, RecursionError) as e:
            backup = self.path + ".corrupt"
            _warn(f"History file {self.path} is not valid JSON ({e}); starting empty, kept a copy at {backup}")
            try:
                shutil.copyfile(self.path, backup)
            except OSError as copy_err:
                log.error("History backup failed: %s", copy_err)
            return
        if not isinstance(raw, list):
            _warn(f"History file {self.path} does not hold a list; starting empty")
            return
        for n, entry in enumerate(raw):
            try:
                self._items.append(HistoryItem.from_dict(entry))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                _warn(f"Dropping malformed history entry #{n}: {e!r}")
        del self._items[self.limit:]
        log.debug("Loaded %d history items from %s", len(self._items), self.path)

    def _persist(self):
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump([it.to_dict() for it in self._items], f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            _warn(f"History save error: {e}")
