"""In-process cache of remote classification results."""

import threading
from collections import OrderedDict

from quillstack.models import ClassificationResult

DEFAULT_CAPACITY = 100


class ClassificationCache:
    """Bounded map from trimmed note text to its remote classification.

    Eviction is FIFO: the oldest inserted entry goes first, and reads or
    re-inserts never move an entry.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, ClassificationResult] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def key_for(text: str) -> str:
        return text.strip()

    def get(self, text: str) -> ClassificationResult | None:
        with self._lock:
            return self._entries.get(self.key_for(text))

    def put(self, text: str, result: ClassificationResult) -> None:
        key = self.key_for(text)
        with self._lock:
            if key in self._entries:
                self._entries[key] = result
                return
            if len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[key] = result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        with self._lock:
            return self.key_for(text) in self._entries
