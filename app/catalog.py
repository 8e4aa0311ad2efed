"""In-memory catalog state: canonical list, active view and pagination."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Sequence

from .filters import Predicate
from .models import DisplayRecord
from .normalizer import is_released
from .pinning import FIRST_PAGE_SIZE, apply_pinned_order, select_pinned
from .ranking import rank

logger = logging.getLogger(__name__)

PAGE_SIZE = 15


def page_bounds(page: int) -> tuple[int, int]:
    """Return the ``[start, end)`` slice for a 1-based page index."""

    if page < 1:
        raise ValueError("Page numbers start at 1")
    if page == 1:
        return 0, FIRST_PAGE_SIZE
    start = FIRST_PAGE_SIZE + (page - 2) * PAGE_SIZE
    return start, start + PAGE_SIZE


def total_pages(total: int) -> int:
    remaining = max(0, total - FIRST_PAGE_SIZE)
    return 1 + math.ceil(remaining / PAGE_SIZE)


@dataclass(frozen=True, slots=True)
class CatalogView:
    """Immutable snapshot of the records currently selected for display."""

    records: tuple[DisplayRecord, ...] = ()
    pinned_ids: tuple[int | str, ...] = ()
    active_page: int = 1
    is_default: bool = True

    @property
    def ordered(self) -> list[DisplayRecord]:
        """Active records with the pin overlay applied to the default view."""

        if not self.is_default:
            return list(self.records)
        return apply_pinned_order(self.records, self.pinned_ids)

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.records))

    def page(self, number: int | None = None) -> list[DisplayRecord]:
        start, end = page_bounds(self.active_page if number is None else number)
        return self.ordered[start:end]


@dataclass(slots=True)
class CatalogStore:
    """Owns the canonical list and rebuilds the active view on every change."""

    preferred_languages: tuple[str, ...]
    include_hindi_hollywood: bool = True
    canonical: tuple[DisplayRecord, ...] = ()
    view: CatalogView = field(default_factory=CatalogView)
    source: str = "empty"

    def replace_canonical(
        self,
        records: Iterable[DisplayRecord],
        *,
        today: date,
        source: str = "unknown",
    ) -> None:
        """Install a new canonical list and reset the default view.

        Unreleased records are dropped before ranking, and the pinned
        first-page subset is recomputed from the released records.
        """

        released = [record for record in records if is_released(record.date, today)]
        ranked = tuple(rank(released))
        pinned = tuple(
            select_pinned(
                released,
                self.preferred_languages,
                include_hindi_hollywood=self.include_hindi_hollywood,
            )
        )
        self.canonical = ranked
        self.source = source
        self.view = CatalogView(records=ranked, pinned_ids=pinned)
        logger.info(
            "Catalog replaced from %s: %s movies (%s pinned)",
            source,
            len(ranked),
            len(pinned),
        )

    def apply_filter(self, predicate: Predicate | None) -> CatalogView:
        """Recompute the active view from the canonical list.

        ``None`` selects the default (pinned) view. The page cursor resets.
        """

        pinned = self.view.pinned_ids
        if predicate is None:
            self.view = CatalogView(records=self.canonical, pinned_ids=pinned)
        else:
            filtered = tuple(record for record in self.canonical if predicate(record))
            self.view = CatalogView(
                records=filtered, pinned_ids=pinned, is_default=False
            )
        return self.view

    def set_page(self, page: int) -> CatalogView:
        if page < 1:
            raise ValueError("Page numbers start at 1")
        self.view = replace(self.view, active_page=page)
        return self.view

    def current_page(self) -> list[DisplayRecord]:
        return self.view.page()

    @property
    def pinned_ids(self) -> Sequence[int | str]:
        return self.view.pinned_ids
