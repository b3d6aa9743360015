"""Configuration for the bookmark filter engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class FilterConfig:
    """Configuration for filter state and history persistence."""
    # History persistence
    history_debounce_seconds: float = 0.5  # Settle delay before a history write
    history_key: str = "bookmark-filter-history"

    # Capacity
    max_recent_searches: int = 10
    max_custom_presets: int = 20

    # Per-view filter state keys are prefix + view id
    state_key_prefix: str = "bookmark-filters-"

    @classmethod
    def from_env(cls) -> "FilterConfig":
        """Create config from environment variables."""
        return cls(
            history_debounce_seconds=float(os.environ.get("BOOKMARK_FILTERS_DEBOUNCE", "0.5")),
            history_key=os.environ.get("BOOKMARK_FILTERS_HISTORY_KEY", "bookmark-filter-history"),
            max_recent_searches=int(os.environ.get("BOOKMARK_FILTERS_MAX_RECENT", "10")),
            max_custom_presets=int(os.environ.get("BOOKMARK_FILTERS_MAX_PRESETS", "20")),
            state_key_prefix=os.environ.get("BOOKMARK_FILTERS_KEY_PREFIX", "bookmark-filters-"),
        )


@dataclass
class Config:
    """Main configuration for the bookmark filter engine."""
    filters: FilterConfig = field(default_factory=FilterConfig.from_env)
    storage_db_path: Optional[Path] = None  # None = use default

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        db_path_str = os.environ.get("BOOKMARK_FILTERS_DB")
        db_path = Path(db_path_str) if db_path_str else None

        return cls(
            filters=FilterConfig.from_env(),
            storage_db_path=db_path,
        )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
