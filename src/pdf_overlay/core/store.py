# SPDX-License-Identifier: Apache-2.0
"""Ordered store of text elements for a loaded document."""

from __future__ import annotations

import copy
import dataclasses
import logging
import time
import uuid
from typing import Any, Iterator, Mapping, Optional

from .models import TextElement

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id"})
_ELEMENT_FIELDS = frozenset(f.name for f in dataclasses.fields(TextElement))


def generate_element_id() -> str:
    """Generate a unique element ID (timestamp + random suffix)."""
    return f"text-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def create_text_element(
    content: str,
    x: float,
    y: float,
    page_number: int,
    *,
    is_predefined: bool = False,
    **style: Any,
) -> TextElement:
    """Construct a new text element with a fresh ID.

    This is the single construction path used by the add, add-predefined
    and drop operations.

    Args:
        content: Initial text.
        x: Left position in stored page units.
        y: Top position in stored page units.
        page_number: 1-based page number.
        is_predefined: Lock the content against editing.
        **style: Any other ``TextElement`` field (font_size, color, ...).

    Returns:
        The new element.
    """
    unknown = set(style) - _ELEMENT_FIELDS
    if unknown:
        raise TypeError(f"Unknown text element fields: {sorted(unknown)}")
    return TextElement(
        id=generate_element_id(),
        content=content,
        x=float(x),
        y=float(y),
        page_number=int(page_number),
        is_predefined=is_predefined,
        **style,
    )


class TextElementStore:
    """Authoritative collection of text elements across all pages.

    Elements keep insertion order. At most one element is selected.
    Operations on unknown IDs are no-ops and never raise.

    Example:
        >>> store = TextElementStore()
        >>> element = create_text_element("Hello", 100, 100, page_number=1)
        >>> store.add(element)
        True
        >>> store.update(element.id, {"font_size": 14})
        True
        >>> [e.content for e in store.by_page(1)]
        ['Hello']
    """

    def __init__(self) -> None:
        self._elements: list[TextElement] = []
        self._selected_id: Optional[str] = None
        self._read_only = False

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[TextElement]:
        return iter(list(self._elements))

    def __contains__(self, element_id: object) -> bool:
        return self._index_of(element_id) is not None

    @property
    def read_only(self) -> bool:
        """Whether updates are currently rejected (preview mode)."""
        return self._read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        self._read_only = bool(value)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected(self) -> Optional[TextElement]:
        """The selected element, or None."""
        return self.get(self._selected_id) if self._selected_id else None

    def _index_of(self, element_id: object) -> Optional[int]:
        for index, element in enumerate(self._elements):
            if element.id == element_id:
                return index
        return None

    def get(self, element_id: Optional[str]) -> Optional[TextElement]:
        """Find an element by ID."""
        index = self._index_of(element_id)
        return self._elements[index] if index is not None else None

    def add(self, element: TextElement) -> bool:
        """Append an element and select it.

        Returns:
            False if an element with the same ID already exists.
        """
        if self._index_of(element.id) is not None:
            logger.warning("Element %s already exists, not added", element.id)
            return False
        self._elements.append(element)
        self._selected_id = element.id
        return True

    def update(
        self,
        element_id: str,
        patch: Optional[Mapping[str, Any]] = None,
        **fields: Any,
    ) -> bool:
        """Merge fields into an element.

        Args:
            element_id: Target element ID.
            patch: Field values to merge.
            **fields: Additional field values (override ``patch``).

        Returns:
            True if the element was found and updated.
        """
        if self._read_only:
            logger.debug("Store is read-only, ignoring update of %s", element_id)
            return False

        index = self._index_of(element_id)
        if index is None:
            return False

        changes = dict(patch or {})
        changes.update(fields)
        for name in list(changes):
            if name in _IMMUTABLE_FIELDS:
                logger.warning("Ignoring attempt to change %s of %s", name, element_id)
                del changes[name]
            elif name not in _ELEMENT_FIELDS:
                logger.warning("Ignoring unknown field %s for %s", name, element_id)
                del changes[name]

        if changes:
            self._elements[index] = dataclasses.replace(self._elements[index], **changes)
        return True

    def delete(self, element_id: str) -> bool:
        """Remove an element, clearing the selection if it was selected."""
        index = self._index_of(element_id)
        if index is None:
            return False
        del self._elements[index]
        if self._selected_id == element_id:
            self._selected_id = None
        return True

    def by_page(self, page_number: int) -> list[TextElement]:
        """Elements on a page, in insertion order."""
        return [e for e in self._elements if e.page_number == page_number]

    def select(self, element_id: Optional[str]) -> Optional[TextElement]:
        """Select an element; unknown IDs deselect.

        Returns:
            The selected element, or None.
        """
        element = self.get(element_id) if element_id else None
        self._selected_id = element.id if element else None
        return element

    def clear(self) -> None:
        """Remove all elements (a new document was loaded)."""
        self._elements.clear()
        self._selected_id = None

    def snapshot(self) -> list[TextElement]:
        """Point-in-time copies of all elements."""
        return [copy.copy(element) for element in self._elements]
