"""FastAPI dependency injection for shared resources."""

import logging
from functools import lru_cache
from pathlib import Path

from quillstack.classification.cache import ClassificationCache
from quillstack.classification.orchestrator import ClassificationOrchestrator
from quillstack.classification.remote import RemoteClassifier, RemoteGate
from quillstack.classification.sections import SectionSplitter
from quillstack.config import Settings
from quillstack.models import ClassificationSettings
from quillstack.network import NetworkProbe
from quillstack.scripts.llm_client import LLMClient
from quillstack.settings import get_classification_settings, load_settings
from quillstack.stores.classification_log import ClassificationLog
from quillstack.stores.cost import CostLedger
from quillstack.stores.kv import KeyValueStore
from quillstack.stores.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_data_path() -> Path:
    """Get the data directory path."""
    settings = get_settings()
    data_path = Path(settings.data_path) if settings.data_path else Path("data")
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def current_classification_settings() -> ClassificationSettings:
    """Read preferences on every call so updates apply without a restart."""
    return get_classification_settings(get_data_path(), get_settings().credential_configured)


@lru_cache
def get_kv_store() -> KeyValueStore:
    """Get cached key-value store instance."""
    return KeyValueStore(get_data_path() / "state.db")


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Get cached rate limiter configured from stored preferences."""
    limits = load_settings(get_data_path())["rate_limits"]
    return RateLimiter(
        get_kv_store(),
        per_minute=int(limits["per_minute"]),
        per_hour=int(limits["per_hour"]),
        per_day=int(limits["per_day"]),
    )


@lru_cache
def get_cost_ledger() -> CostLedger:
    """Get cached cost ledger with budgets from preferences and rates from config."""
    settings = get_settings()
    budgets = load_settings(get_data_path())["budgets"]
    return CostLedger(
        get_kv_store(),
        input_rate=settings.input_cost_per_mtok,
        output_rate=settings.output_cost_per_mtok,
        daily_budget_usd=budgets.get("daily_usd"),
        monthly_budget_usd=budgets.get("monthly_usd"),
        lifetime_budget_usd=budgets.get("lifetime_usd"),
        alert_threshold=float(budgets.get("alert_threshold", 0.80)),
    )


@lru_cache
def get_classification_log() -> ClassificationLog:
    """Get cached classification log instance."""
    return ClassificationLog(get_data_path() / "classifications.db")


@lru_cache
def get_network_probe() -> NetworkProbe:
    """Get cached network reachability probe."""
    settings = get_settings()
    return NetworkProbe(settings.reachability_url, ttl_seconds=settings.reachability_ttl_seconds)


@lru_cache
def get_llm_client() -> LLMClient:
    """Get cached LLM client instance."""
    return LLMClient(cost_ledger=get_cost_ledger(), settings=get_settings())


@lru_cache
def get_classification_cache() -> ClassificationCache:
    """Get cached classification result cache."""
    return ClassificationCache()


@lru_cache
def get_remote_gate() -> RemoteGate:
    """Get cached remote call gate."""
    return RemoteGate(
        llm=get_llm_client(),
        rate_limiter=get_rate_limiter(),
        cost_ledger=get_cost_ledger(),
        network=get_network_probe(),
    )


@lru_cache
def get_remote_classifier() -> RemoteClassifier:
    """Get cached remote classifier instance."""
    return RemoteClassifier(get_remote_gate(), cache=get_classification_cache())


@lru_cache
def get_orchestrator() -> ClassificationOrchestrator:
    """Get cached classification orchestrator."""
    return ClassificationOrchestrator(
        remote=get_remote_classifier(),
        settings_provider=current_classification_settings,
    )


@lru_cache
def get_section_splitter() -> SectionSplitter:
    """Get cached section splitter."""
    return SectionSplitter(
        get_orchestrator(),
        gate=get_remote_gate(),
        settings_provider=current_classification_settings,
    )
