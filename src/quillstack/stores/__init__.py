"""Persistent stores for rate windows, cost accounting, and classification history."""

from quillstack.stores.classification_log import ClassificationLog
from quillstack.stores.cost import CostLedger
from quillstack.stores.kv import KeyValueStore
from quillstack.stores.rate_limit import RateLimiter

__all__ = ["KeyValueStore", "RateLimiter", "CostLedger", "ClassificationLog"]
