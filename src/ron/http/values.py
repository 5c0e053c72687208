"""Immutable multi-valued mappings: request headers and URL-encoded values.

Both implement ``Mapping[str, str]`` (first value wins) plus
``get_list`` for every value of a key. ``Values`` backs the query
string and URL-encoded form bodies alike.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class Headers(Mapping[str, str]):
    """Case-insensitive view over raw ASGI header pairs.

    Decodes lazily; names are reported lowercased.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw

    def _values(self, key: str) -> list[str]:
        wanted = key.lower().encode("latin-1")
        return [v.decode("latin-1") for k, v in self._raw if k.lower() == wanted]

    def __getitem__(self, key: str) -> str:
        found = self._values(key)
        if not found:
            raise KeyError(key)
        return found[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(self._values(key))

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(k.decode("latin-1").lower() for k, _ in self._raw))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in arrival order."""
        return self._values(key)

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw


class Values(Mapping[str, str]):
    """Parsed ``application/x-www-form-urlencoded`` data.

    Blank values are kept (``?page=`` yields ``""``), so callers can
    tell an empty parameter from a missing one.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, encoded: bytes | str = b"") -> None:
        text = encoded.decode("latin-1") if isinstance(encoded, bytes) else encoded
        self._raw = text
        self._data: dict[str, list[str]] = parse_qs(text, keep_blank_values=True)

    @classmethod
    def merged(cls, *sources: "Values") -> "Values":
        """Combine several value sets; earlier sources list their values first."""
        combined = cls()
        for source in sources:
            for key, values in source._data.items():
                combined._data.setdefault(key, []).extend(values)
        combined._raw = "&".join(s._raw for s in sources if s._raw)
        return combined

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Values({self._data!r})"

    def get_list(self, key: str) -> list[str]:
        """All values for *key* (repeated parameters, multi-selects)."""
        return list(self._data.get(key, ()))

    @property
    def encoded(self) -> str:
        """The original encoded string."""
        return self._raw
