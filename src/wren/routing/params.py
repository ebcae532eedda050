"""Path parameters extracted from a matched chain.

Implements ``Mapping[str, str]`` and the ``MultiValueMapping`` protocol.
Rebuilt on every successful match, in chain order.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import unquote

from wren.routing.fragment import RouteFragment


class PathParams(Mapping[str, str]):
    """Immutable, ordered, multi-valued path parameters.

    ``:name`` segments are keyed by ``name``; values are URL-decoded.
    A name repeated along the chain keeps every value in order.
    """

    _data: dict[str, list[str]]

    __slots__ = ("_data",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        data: dict[str, list[str]] = {}
        for name, value in pairs:
            data.setdefault(name, []).append(value)
        object.__setattr__(self, "_data", data)

    @classmethod
    def from_chain(cls, chain: Iterable[RouteFragment]) -> "PathParams":
        return cls(
            (fragment.abstract.segment.param_name, unquote(fragment.path))
            for fragment in chain
            if fragment.abstract.is_param and fragment.path is not None
        )

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"PathParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    def multi_items(self) -> list[tuple[str, str]]:
        """Every (name, value) pair, in insertion order."""
        return [(name, value) for name, values in self._data.items() for value in values]
