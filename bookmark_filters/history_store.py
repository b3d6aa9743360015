"""Recent searches, saved filter presets and usage counters.

History lives in memory and is written to storage as one JSON blob under a
fixed key. Writes are debounced: each mutation replaces any pending write,
so a burst of changes produces a single write of the latest state once the
settle delay passes. Anything not yet flushed is lost if the process dies;
call ``flush()`` or ``close()`` to write immediately.
"""
import asyncio
import json
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bookmark_filters.config import FilterConfig, get_config
from bookmark_filters.models import (
    PRESET_FILTER_KEYS,
    FilterHistoryData,
    FilterPreset,
    FilterState,
)
from bookmark_filters.storage import KeyValueStorage


class FilterHistoryStore:
    """Per-instance history state with its own debounced writer.

    Mutating methods are plain calls but schedule the write on the running
    event loop, so they must be called from within one.
    """

    def __init__(self, storage: KeyValueStorage, config: Optional[FilterConfig] = None):
        self.storage = storage
        self.config = config or get_config().filters
        self.data = FilterHistoryData()
        self._pending: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> FilterHistoryData:
        """Load history from storage. Missing or corrupt data leaves it empty."""
        try:
            raw = await self.storage.get(self.config.history_key)
            if raw is not None:
                parsed = json.loads(raw)
                if not isinstance(parsed, dict):
                    raise ValueError("history blob is not an object")
                self.data = FilterHistoryData.from_dict(parsed)
        except Exception as e:
            print(f"[FilterHistoryStore] Error loading filter history: {e}", file=sys.stderr)

        return self.data

    async def flush(self) -> None:
        """Cancel any pending write and write the current state now."""
        self._cancel_pending()
        await self._write()

    async def close(self) -> None:
        """Flush a pending write, if there is one."""
        if self.has_pending_write:
            await self.flush()

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _schedule_persist(self) -> None:
        self._cancel_pending()
        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._persist_later())

    async def _persist_later(self) -> None:
        await asyncio.sleep(self.config.history_debounce_seconds)
        await self._write()

    async def _write(self) -> None:
        try:
            await self.storage.set(self.config.history_key, json.dumps(self.data.to_dict()))
        except Exception as e:
            print(f"[FilterHistoryStore] Error saving filter history: {e}", file=sys.stderr)

    # ------------------------------------------------------------------
    # Recent searches
    # ------------------------------------------------------------------

    @property
    def recent_searches(self) -> List[str]:
        return list(self.data.recent_searches)

    def add_recent_search(self, search_term: str) -> None:
        """Move a search to the front of the recent list. Blank input is ignored."""
        term = search_term.strip() if search_term else ""
        if not term:
            return

        recent = [term] + [s for s in self.data.recent_searches if s != term]
        self.data.recent_searches = recent[:self.config.max_recent_searches]
        self._schedule_persist()

    def clear_recent_searches(self) -> None:
        self.data.recent_searches = []
        self._schedule_persist()

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @property
    def custom_presets(self) -> List[FilterPreset]:
        return list(self.data.custom_presets)

    def get_preset(self, preset_id: str) -> Optional[FilterPreset]:
        for preset in self.data.custom_presets:
            if preset.id == preset_id:
                return preset
        return None

    def save_filter_preset(
        self,
        name: str,
        description: str,
        filters: Union[FilterState, Dict[str, Any]],
    ) -> str:
        """Save filters as a named preset, replacing one with the same name.

        Args:
            name: Preset name (stripped; must not be blank)
            description: Free-form description
            filters: Full FilterState or a partial camelCase dict

        Returns:
            ID of the new preset

        Raises:
            ValueError: If the name is blank
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Preset name must not be blank")

        data = filters.to_dict() if isinstance(filters, FilterState) else dict(filters)
        preset = FilterPreset(
            id=f"custom-{uuid.uuid4().hex}",
            name=name,
            description=(description or "").strip(),
            filters={key: data[key] for key in PRESET_FILTER_KEYS if key in data},
            created_at=datetime.now(timezone.utc).isoformat(),
            usage_count=0,
        )

        presets = [preset] + [p for p in self.data.custom_presets if p.name != name]
        self.data.custom_presets = presets[:self.config.max_custom_presets]
        self._schedule_persist()

        return preset.id

    def delete_filter_preset(self, preset_id: str) -> bool:
        """Delete a preset. Returns True if it existed."""
        before = len(self.data.custom_presets)
        self.data.custom_presets = [p for p in self.data.custom_presets if p.id != preset_id]
        deleted = len(self.data.custom_presets) < before
        if deleted:
            self._schedule_persist()
        return deleted

    def increment_preset_usage(self, preset_id: str) -> bool:
        """Count one explicit application of a preset. Returns True if found."""
        preset = self.get_preset(preset_id)
        if preset is None:
            return False
        preset.usage_count += 1
        self._schedule_persist()
        return True

    # ------------------------------------------------------------------
    # Usage stats
    # ------------------------------------------------------------------

    @property
    def filter_usage_stats(self) -> Dict[str, int]:
        return dict(self.data.filter_usage_stats)

    def record_filter_usage(self, kind: str) -> int:
        """Increment the usage counter for a kind of filter (e.g. 'tag', 'date-range')."""
        count = self.data.filter_usage_stats.get(kind, 0) + 1
        self.data.filter_usage_stats[kind] = count
        self._schedule_persist()
        return count

    def clear_all_history(self) -> None:
        """Drop recent searches, presets and usage stats."""
        self.data = FilterHistoryData()
        self._schedule_persist()
