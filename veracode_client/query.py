"""
Query string encoding for the Veracode APIs.

The APIs do not accept ``+`` as a space in query parameters
(``?name=foo+bar`` is answered with a 401), so spaces are sent as ``%20``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode


@dataclass(frozen=True)
class SortField:
    """Sort by one camelCase field name, ascending unless ``descending``."""

    name: str
    descending: bool = False

    def __str__(self):
        return f"{self.name},desc" if self.descending else self.name


@dataclass
class PageOptions:
    """Page through a collection endpoint and set its page size."""

    page: int = 0
    size: Optional[int] = None
    sort: List[SortField] = field(default_factory=list)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": self.page}
        if self.size:
            params["size"] = self.size
        if self.sort:
            params["sort"] = [str(s) for s in self.sort]
        return params


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_encode(options: Optional[Mapping[str, Any]]) -> str:
    """
    Encode a mapping into a query string, replacing ``+`` with ``%20``.

    Sequence values repeat the key; None values are left out. A literal
    ``+`` inside a value is percent encoded as ``%2B`` and is not affected.
    """
    if not options:
        return ""

    pairs = []
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _encode_value(v)) for v in value)
        else:
            pairs.append((key, _encode_value(value)))

    return urlencode(pairs).replace("+", "%20")
