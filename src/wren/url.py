"""Immutable URL values and query string parameters.

``Url`` is what the history source hands to the router. ``QueryParams``
implements ``Mapping[str, str]`` and the ``MultiValueMapping`` protocol.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from urllib.parse import SplitResult, parse_qs, urljoin, urlsplit

from wren._internal.multimap import MultiValueMapping

DEFAULT_ORIGIN = "http://localhost"


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Attributes:
        _data: Parsed query string as field name -> list of values.
        _raw: Raw query string.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    _data: dict[str, list[str]]
    _raw: str

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: str = "") -> None:
        object.__setattr__(self, "_raw", query_string)
        parsed = parse_qs(query_string, keep_blank_values=True)
        object.__setattr__(self, "_data", parsed)

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
        return f"QueryParams({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    @property
    def raw(self) -> str:
        return self._raw


@dataclass(frozen=True, slots=True)
class Url:
    """An absolute URL as seen by the router.

    Build one with :meth:`parse`, which resolves relative references
    against a base URL the way a browser location does::

        Url.parse("/test/1234?y=100")
        Url.parse("child", base=Url.parse("/parent/"))
    """

    href: str

    @classmethod
    def parse(cls, value: "str | Url", base: "str | Url | None" = None) -> "Url":
        """Resolve *value* against *base* (default ``http://localhost/``)."""
        if isinstance(value, Url):
            return value
        base_href = base.href if isinstance(base, Url) else (base or f"{DEFAULT_ORIGIN}/")
        href = urljoin(base_href, str(value))
        split = urlsplit(href)
        if not split.path:
            href = split._replace(path="/").geturl()
        return cls(href)

    @property
    def _split(self) -> SplitResult:
        return urlsplit(self.href)

    @property
    def origin(self) -> str:
        split = self._split
        return f"{split.scheme}://{split.netloc}"

    @property
    def path(self) -> str:
        """The raw (still percent-encoded) path, always starting with ``/``."""
        return self._split.path or "/"

    @property
    def query(self) -> MultiValueMapping:
        return QueryParams(self._split.query)

    @property
    def fragment(self) -> str:
        return self._split.fragment

    def __str__(self) -> str:
        return self.href
