"""
Stats, batches and API responses exchanged with StatHat.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class CountStat:
    """A counter increment."""
    name: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'stat': self.name, 'count': self.count}


@dataclass(frozen=True)
class ValueStat:
    """A value sample."""
    name: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {'stat': self.name, 'value': self.value}


Stat = Union[CountStat, ValueStat]


@dataclass
class Batch:
    """
    An ordered group of stats sent in one request.

    A batch belongs to the batcher while it is filling up and to a single
    flush once dispatched.
    """
    key: str
    items: List[Stat] = field(default_factory=list)

    def append(self, stat: Stat) -> None:
        self.items.append(stat)

    def __len__(self) -> int:
        return len(self.items)

    def to_payload(self) -> Dict[str, Any]:
        """
        Build the EZ API request body.

        Returns:
            dict: {"ezkey": key, "data": [stat, ...]}
        """
        return {
            'ezkey': self.key,
            'data': [item.to_dict() for item in self.items],
        }


@dataclass
class APIResponse:
    """Decoded StatHat response."""
    status: int
    msg: Optional[str] = None
    multiple: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == 200

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'APIResponse':
        """
        Build a response from decoded JSON.

        Raises:
            ValueError: If the body has no integer status
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        status = data.get('status')
        if isinstance(status, bool) or not isinstance(status, int):
            raise ValueError(f"missing or invalid status: {status!r}")
        return cls(status=status, msg=data.get('msg'), multiple=data.get('multiple'))
