"""
Page metadata, navigation links and the response envelope.

Collection endpoints return a ``page`` object and ``_links`` next to the
embedded entities. DTOs that unmarshal such collections subclass
CollectionResult so that the envelope can expose the page metadata.
"""

import abc
from dataclasses import dataclass
from typing import Any, Optional

import requests


@dataclass(frozen=True)
class PageMeta:
    number: int = 0
    size: int = 0
    total_elements: int = 0
    total_pages: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PageMeta":
        data = data or {}
        return cls(
            number=data.get("number", 0),
            size=data.get("size", 0),
            total_elements=data.get("total_elements", 0),
            total_pages=data.get("total_pages", 0),
        )


@dataclass(frozen=True)
class NavLinks:
    """Hrefs of the first, last, next, previous and current pages."""

    first: Optional[str] = None
    last: Optional[str] = None
    next: Optional[str] = None
    prev: Optional[str] = None
    self: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "NavLinks":
        data = data or {}

        def href(name):
            link = data.get(name)
            return link.get("href") if isinstance(link, dict) else None

        return cls(
            first=href("first"),
            last=href("last"),
            next=href("next"),
            prev=href("prev"),
            self=href("self"),
        )


class CollectionResult(abc.ABC):
    """Implemented by results that carry page metadata and navigation links."""

    @abc.abstractmethod
    def get_page_meta(self) -> PageMeta:
        ...

    @abc.abstractmethod
    def get_links(self) -> NavLinks:
        ...


@dataclass
class Response:
    """Envelope returned for every successful call."""

    raw: requests.Response
    result: Any = None
    page: Optional[PageMeta] = None
    links: Optional[NavLinks] = None

    @property
    def status_code(self) -> int:
        return self.raw.status_code


def new_response(raw: requests.Response, result: Any = None) -> Response:
    response = Response(raw=raw, result=result)

    if isinstance(result, CollectionResult):
        response.page = result.get_page_meta()
        response.links = result.get_links()

    return response
