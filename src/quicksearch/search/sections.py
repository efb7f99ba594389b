"""Section visibility and ordering for the searching and idle layouts.

Each layout is a fixed slot template. The SECTIONS slot expands into the
enabled sections in the user's order. Permission-forced disablement is derived
at read time and never written back to preferences, so a re-granted permission
restores whatever the user had stored.
"""

import logging
from collections.abc import Iterable, Sequence

from quicksearch.contracts.search_v1 import (
    ItemSlot,
    Layout,
    LayoutItem,
    SectionId,
    SectionItem,
    SectionState,
    SlotItem,
)
from quicksearch.preferences.permissions import Permission

logger = logging.getLogger(__name__)

DEFAULT_SECTION_ORDER: tuple[SectionId, ...] = (
    SectionId.APPS,
    SectionId.APP_SHORTCUTS,
    SectionId.FILES,
    SectionId.CONTACTS,
    SectionId.SETTINGS,
)

LAYOUT_TEMPLATES: dict[Layout, tuple[ItemSlot, ...]] = {
    Layout.SEARCHING: (
        ItemSlot.ERROR_BANNER,
        ItemSlot.CALCULATOR_RESULT,
        ItemSlot.DIRECT_SEARCH_RESULT,
        ItemSlot.SECTIONS,
        ItemSlot.WEB_SUGGESTIONS,
        ItemSlot.SEARCH_ENGINES_INLINE,
        ItemSlot.NO_RESULTS_MESSAGE,
    ),
    Layout.IDLE: (
        ItemSlot.ERROR_BANNER,
        ItemSlot.SECTIONS,
        ItemSlot.RECENT_QUERIES,
    ),
}

# Sections whose source needs a runtime permission.
SECTION_PERMISSIONS: dict[SectionId, Permission] = {
    SectionId.CONTACTS: Permission.CONTACTS,
    SectionId.FILES: Permission.FILES,
}


def forced_disabled(granted: Iterable[Permission]) -> frozenset[SectionId]:
    """Sections that must be hidden because their permission is missing."""
    granted_set = set(granted)
    return frozenset(
        section
        for section, permission in SECTION_PERMISSIONS.items()
        if permission not in granted_set
    )


def sanitize_order(user_order: Sequence[SectionId | str] | None) -> list[SectionId]:
    """Turn a stored order into a full permutation of the section set.

    Unknown and duplicate entries are dropped; missing sections are appended
    in default order.
    """
    ordered: list[SectionId] = []
    for raw in user_order or ():
        try:
            section = SectionId(raw)
        except ValueError:
            logger.debug("Ignoring unknown section '%s' in stored order", raw)
            continue
        if section not in ordered:
            ordered.append(section)
    ordered.extend(s for s in DEFAULT_SECTION_ORDER if s not in ordered)
    return ordered


class SectionOrderer:
    def order(
        self,
        layout: Layout,
        user_order: Sequence[SectionId | str] | None,
        user_disabled: Iterable[SectionId],
        permission_disabled: Iterable[SectionId],
    ) -> list[SectionState]:
        """Enabled sections in display order; disabled ones are omitted."""
        if layout not in LAYOUT_TEMPLATES:
            raise ValueError(f"Unknown layout: {layout}")
        disabled = set(user_disabled) | set(permission_disabled)
        enabled = [s for s in sanitize_order(user_order) if s not in disabled]
        return [
            SectionState(section=section, enabled=True, position=position)
            for position, section in enumerate(enabled)
        ]

    def layout_items(
        self,
        layout: Layout,
        user_order: Sequence[SectionId | str] | None,
        user_disabled: Iterable[SectionId],
        permission_disabled: Iterable[SectionId],
    ) -> list[LayoutItem]:
        """Full item sequence: fixed slots with the section region expanded."""
        sections = self.order(layout, user_order, user_disabled, permission_disabled)
        items: list[LayoutItem] = []
        for slot in LAYOUT_TEMPLATES[layout]:
            if slot == ItemSlot.SECTIONS:
                items.extend(SectionItem(section=s.section) for s in sections)
            else:
                items.append(SlotItem(slot=slot))
        return items
