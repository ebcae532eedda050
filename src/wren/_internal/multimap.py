"""MultiValueMapping protocol — what ``Url.query`` and ``Router.params`` expose.

Query strings and matched paths can both carry a name more than once.
Callers read either through this structural protocol, so ``QueryParams``
and ``PathParams`` stay interchangeable.
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """Read-only string mapping; ``[key]`` is the first value, ``get_list`` all of them."""

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...
