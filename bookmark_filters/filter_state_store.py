"""Per-view persistence of filter state."""
import json
import sys
from typing import Optional

from bookmark_filters.config import FilterConfig, get_config
from bookmark_filters.models import FilterState
from bookmark_filters.storage import KeyValueStorage


class FilterStateStore:
    """Loads and saves one FilterState per view id (e.g. 'sidebar', 'window').

    Writes go straight through to storage. Storage and decode failures are
    reported on stderr and never raised to the caller.
    """

    def __init__(self, storage: KeyValueStorage, config: Optional[FilterConfig] = None):
        self.storage = storage
        self.config = config or get_config().filters

    def key_for(self, view_id: str) -> str:
        return f"{self.config.state_key_prefix}{view_id}"

    async def load(self, view_id: str, defaults: Optional[FilterState] = None) -> FilterState:
        """Load the stored state for a view.

        Args:
            view_id: View identifier
            defaults: State to use when nothing valid is stored

        Returns:
            Stored state merged over the defaults, or the defaults when the
            value is missing or corrupt
        """
        defaults = defaults or FilterState()

        try:
            raw = await self.storage.get(self.key_for(view_id))
        except Exception as e:
            print(f"[FilterStateStore] Error reading filters for '{view_id}': {e}", file=sys.stderr)
            return defaults

        if raw is None:
            return defaults

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            print(f"[FilterStateStore] Ignoring corrupt filters for '{view_id}': {e}", file=sys.stderr)
            return defaults

        if not isinstance(data, dict):
            print(f"[FilterStateStore] Ignoring corrupt filters for '{view_id}': not an object", file=sys.stderr)
            return defaults

        try:
            return defaults.merged(data)
        except (OverflowError, TypeError, ValueError) as e:
            print(f"[FilterStateStore] Ignoring corrupt filters for '{view_id}': {e}", file=sys.stderr)
            return defaults

    async def save(self, view_id: str, state: FilterState) -> None:
        """Persist a view's state immediately."""
        try:
            await self.storage.set(self.key_for(view_id), json.dumps(state.to_dict()))
        except Exception as e:
            print(f"[FilterStateStore] Error saving filters for '{view_id}': {e}", file=sys.stderr)

    async def clear(self, view_id: str) -> None:
        """Forget a view's stored state."""
        try:
            await self.storage.delete(self.key_for(view_id))
        except Exception as e:
            print(f"[FilterStateStore] Error clearing filters for '{view_id}': {e}", file=sys.stderr)
