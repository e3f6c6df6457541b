from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class HistoryEntry(Generic[T]):
    start_month: str
    amount: T


def resolve(
    entries: Sequence[HistoryEntry[T]], month: str, fallback: Optional[T] = None
) -> Optional[T]:
    """Amount of the latest entry whose start_month is not after ``month``.

    Entries must already be sorted ascending by start_month. When two entries
    share a start_month the one encountered last wins.
    """
    found: Optional[HistoryEntry[T]] = None
    for entry in entries:
        if entry.start_month > month:
            break
        found = entry
    if found is None:
        return fallback
    return found.amount


def latest_start(entries: Sequence[HistoryEntry[T]], month: str) -> Optional[str]:
    latest: Optional[str] = None
    for entry in entries:
        if entry.start_month > month:
            break
        latest = entry.start_month
    return latest


class HistorySequence(Generic[T]):
    """Time-ordered values keyed by effective month, one entry per month."""

    def __init__(self, entries: Iterable[HistoryEntry[T]] = ()) -> None:
        self._entries: tuple[HistoryEntry[T], ...] = tuple(
            sorted(entries, key=lambda e: e.start_month)
        )

    @classmethod
    def of(cls, *pairs: tuple[str, T]) -> "HistorySequence[T]":
        return cls(HistoryEntry(start, amount) for start, amount in pairs)

    def upsert(self, start_month: str, amount: T) -> "HistorySequence[T]":
        kept = [e for e in self._entries if e.start_month != start_month]
        kept.append(HistoryEntry(start_month, amount))
        return HistorySequence(kept)

    def remove(self, start_month: str) -> "HistorySequence[T]":
        return HistorySequence(
            e for e in self._entries if e.start_month != start_month
        )

    def resolve(self, month: str, fallback: Optional[T] = None) -> Optional[T]:
        return resolve(self._entries, month, fallback)

    def latest_start(self, month: str) -> Optional[str]:
        return latest_start(self._entries, month)

    @property
    def entries(self) -> tuple[HistoryEntry[T], ...]:
        return self._entries

    def __iter__(self) -> Iterator[HistoryEntry[T]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, HistorySequence) and self._entries == other._entries
        )

    def __repr__(self) -> str:
        return f"HistorySequence({list(self._entries)!r})"
