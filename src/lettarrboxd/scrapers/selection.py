from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lettarrboxd.models import TakeStrategy

if TYPE_CHECKING:
    from lettarrboxd.config import Settings


@dataclass(frozen=True)
class Selection:
    """Optional "take N newest/oldest" truncation of a discovered link set.

    ``oldest`` is honoured at the source: scrapers ask Letterboxd for an
    earliest-first ordering before paginating, then keep the first ``take``.
    """

    take: int | None = None
    strategy: TakeStrategy | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Selection:
        return cls(take=settings.take_amount, strategy=settings.take_strategy)

    @property
    def oldest_first(self) -> bool:
        return self.strategy is TakeStrategy.OLDEST

    def apply(self, links: list[str]) -> list[str]:
        if self.take is None:
            return list(links)
        return links[: self.take]


__all__ = ["Selection"]
