import json
from dataclasses import dataclass, field
from typing import Mapping, Union


@dataclass(frozen=True)
class Flat:
    value: int

    def total(self) -> int:
        return self.value


@dataclass(frozen=True)
class Breakdown:
    items: Mapping[str, int] = field(default_factory=dict)

    def total(self) -> int:
        return sum(self.items.values())

    def get(self, subcategory_id: str) -> int:
        return self.items.get(subcategory_id, 0)


Amount = Union[Flat, Breakdown]
RawAmount = Union[int, float, Mapping[str, Union[int, float]]]


def total(amount: Amount) -> int:
    """Category total: the flat value, or the sum of the breakdown."""
    return amount.total()


def _whole(value: Union[int, float]) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Amount must be a whole number: {value!r}")
    return int(value)


def from_raw(raw: RawAmount) -> Amount:
    if isinstance(raw, Mapping):
        return Breakdown({str(key): _whole(value) for key, value in raw.items()})
    return Flat(_whole(raw))


def to_raw(amount: Amount) -> RawAmount:
    if isinstance(amount, Breakdown):
        return dict(amount.items)
    return amount.value


def from_json(payload: str) -> Amount:
    return from_raw(json.loads(payload))


def to_json(amount: Amount) -> str:
    return json.dumps(to_raw(amount), sort_keys=True)
