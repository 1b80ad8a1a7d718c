"""
Dynamic tech collection for the signup form.

Entries live in the host form's state (st.session_state by default) as an
arena keyed by stable id plus an ordered list of ids. Widgets bind to the
stable id, so removing a row never changes the identity of the others.
Validation sees a plain index-ordered list via to_raw().
"""

import streamlit as st
import logging
import uuid
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, Optional, Tuple

from .exceptions import UnknownEntryError
from .models import CollectionEntry

logger = logging.getLogger(__name__)

ENTRY_FIELDS = ('title', 'knowledge')
DEFAULT_KNOWLEDGE = 0


def _new_stable_id() -> str:
    return uuid.uuid4().hex


class TechCollection:
    """Ordered, stable-id keyed list of tech entries."""

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None, key: str = "techs",
                 default_knowledge: Any = DEFAULT_KNOWLEDGE,
                 id_factory: Callable[[], str] = _new_stable_id):
        """
        Args:
            state: Mapping that holds the live form state (st.session_state when None)
            key: Field name of the collection; prefixes every state key
            default_knowledge: Knowledge value of newly appended entries
            id_factory: Generator for stable ids
        """
        self._state = state if state is not None else st.session_state
        self.key = key
        self.default_knowledge = default_knowledge
        self._id_factory = id_factory
        self._entries_key = f"{key}_entries"
        self._order_key = f"{key}_order"
        self._ensure_initialized()

    def _ensure_initialized(self) -> None:
        if self._entries_key not in self._state:
            self._state[self._entries_key] = {}
        if self._order_key not in self._state:
            self._state[self._order_key] = []

    @property
    def _entries(self) -> Dict[str, Dict[str, Any]]:
        return self._state[self._entries_key]

    @property
    def _order(self) -> List[str]:
        return self._state[self._order_key]

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[CollectionEntry]:
        return iter(self.current_entries())

    def append(self, title: str = "", knowledge: Any = None) -> CollectionEntry:
        """Add an entry at the end with a fresh stable id."""
        stable_id = self._id_factory()
        while stable_id in self._entries:
            stable_id = self._id_factory()

        if knowledge is None:
            knowledge = self.default_knowledge

        self._entries[stable_id] = {'title': title, 'knowledge': knowledge}
        self._order.append(stable_id)
        logger.debug(f"Appended {self.key} entry {stable_id} at position {len(self._order) - 1}")
        return self._project(stable_id)

    def remove_at(self, position: int) -> Optional[CollectionEntry]:
        """
        Remove the entry at position.

        Out-of-range positions (negative ones included) are ignored and
        return None; they come from stale clicks and are harmless because
        validation re-reads the current entries.
        """
        if not isinstance(position, int) or isinstance(position, bool) or not 0 <= position < len(self._order):
            logger.info(f"Ignoring remove of {self.key} position {position!r}; collection has {len(self._order)} entries")
            return None

        stable_id = self._order.pop(position)
        removed = CollectionEntry(stable_id=stable_id, **self._entries.pop(stable_id))
        self._forget_widgets(stable_id)
        logger.debug(f"Removed {self.key} entry {stable_id} from position {position}")
        return removed

    def update(self, stable_id: str, **changes: Any) -> CollectionEntry:
        """
        Change title and/or knowledge of an entry.

        Raises:
            UnknownEntryError: If stable_id is not in the collection
            ValueError: If a change names an unknown entry field
        """
        if stable_id not in self._entries:
            raise UnknownEntryError(stable_id)

        unknown = set(changes) - set(ENTRY_FIELDS)
        if unknown:
            raise ValueError(f"Unknown entry fields: {sorted(unknown)}")

        self._entries[stable_id].update(changes)
        return self._project(stable_id)

    def current_entries(self) -> Tuple[CollectionEntry, ...]:
        """Read-only projection in display order."""
        return tuple(self._project(stable_id) for stable_id in self._order)

    def to_raw(self) -> List[Dict[str, Any]]:
        """The 'techs' slice of the next raw candidate record."""
        return [entry.to_raw() for entry in self.current_entries()]

    def widget_key(self, stable_id: str, field: str) -> str:
        """State key of the input bound to one field of one entry."""
        return f"{self.key}_{stable_id}_{field}"

    def field_path(self, position: int, field: str) -> str:
        """Dotted path used to look up validation errors for a row."""
        return f"{self.key}.{position}.{field}"

    def sync_from_widgets(self) -> None:
        """Copy current widget values of every row into the entries."""
        for stable_id in self._order:
            changes = {}
            for field in ENTRY_FIELDS:
                widget_key = self.widget_key(stable_id, field)
                if widget_key in self._state:
                    changes[field] = self._state[widget_key]
            if changes:
                self._entries[stable_id].update(changes)

    def reset(self, entries: Optional[List[Dict[str, Any]]] = None) -> None:
        """Empty the collection, optionally seeding it with new entries."""
        for stable_id in list(self._order):
            self._forget_widgets(stable_id)
        self._state[self._entries_key] = {}
        self._state[self._order_key] = []
        for entry in entries or []:
            self.append(entry.get('title', ''), entry.get('knowledge'))
        logger.info(f"Reset {self.key} collection with {len(self._order)} entries")

    def _project(self, stable_id: str) -> CollectionEntry:
        return CollectionEntry(stable_id=stable_id, **self._entries[stable_id])

    def _forget_widgets(self, stable_id: str) -> None:
        for field in ENTRY_FIELDS:
            widget_key = self.widget_key(stable_id, field)
            if widget_key in self._state:
                del self._state[widget_key]
