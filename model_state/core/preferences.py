"""Mutation operations on the model preference document.

PreferenceStore wraps a PreferenceState and enforces its invariants.
It performs no I/O: the owning application decides when to persist
with ``model_state.storage.store.save_state``.
"""

from __future__ import annotations

from typing import List, Optional

from model_state.core.models import MAX_RECENT, ModelRef, PreferenceState


class PreferenceStore:
    """In-memory model preferences with recent, favorite and variant operations"""

    def __init__(self, state: Optional[PreferenceState] = None) -> None:
        self.state = state if state is not None else PreferenceState.empty()

    @property
    def recent(self) -> List[ModelRef]:
        return self.state.recent

    @property
    def favorite(self) -> List[ModelRef]:
        return self.state.favorite

    def record_used(self, ref: ModelRef) -> None:
        """Promote ref to the front of the recency list

        Any existing occurrence is removed first, so re-selecting a model
        moves it to the front. Entries past MAX_RECENT fall off the tail.
        """
        recent = [r for r in self.state.recent if r != ref]
        recent.insert(0, ref)
        self.state.recent = recent[:MAX_RECENT]

    def toggle_favorite(self, ref: ModelRef) -> bool:
        """Add ref to favorites, or remove it if already present

        Returns:
            True if ref is a favorite after the call.
        """
        if ref in self.state.favorite:
            self.state.favorite = [r for r in self.state.favorite if r != ref]
            return False
        self.state.favorite = [*self.state.favorite, ref]
        return True

    def set_variant(self, ref: ModelRef, variant: Optional[str]) -> None:
        """Set or clear the preferred variant for ref

        Clearing removes the key so the map stays sparse.
        """
        if variant is None:
            self.state.variant.pop(ref.key, None)
        else:
            self.state.variant[ref.key] = variant

    def is_favorite(self, ref: ModelRef) -> bool:
        return ref in self.state.favorite

    def get_variant(self, ref: ModelRef) -> Optional[str]:
        return self.state.variant_for(ref)

    def current(self) -> Optional[ModelRef]:
        """Most recently used model, if any"""
        return self.state.recent[0] if self.state.recent else None

    def cycle_favorite(self, direction: int = 1) -> Optional[ModelRef]:
        """Next favorite relative to the current model

        Wraps around at either end. When the current model is not a
        favorite, starts from the first favorite (or the last one when
        cycling backwards). Does not mutate; callers record the result
        with record_used if they select it.

        Args:
            direction: 1 to move forward, -1 to move backward.

        Returns:
            The favorite to switch to, or None when there are no favorites.
        """
        favorites = self.state.favorite
        if not favorites:
            return None

        step = 1 if direction >= 0 else -1
        current = self.current()
        if current is None or current not in favorites:
            return favorites[0] if step > 0 else favorites[-1]

        index = favorites.index(current)
        return favorites[(index + step) % len(favorites)]
