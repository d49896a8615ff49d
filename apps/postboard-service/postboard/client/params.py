"""
List search params (page, pageSize, q) as kept in a page URL.

Values equal to their defaults are left out of the serialized query so
the default listing has a clean URL. Unparseable values fall back to the
default.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping

from postboard.utils.settings import DEFAULT_PAGE, DEFAULT_PAGE_SIZE


def _parse_int(raw: Any, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class PostsParams:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    q: str = ""

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> "PostsParams":
        return cls(
            page=_parse_int(query.get("page"), DEFAULT_PAGE),
            page_size=_parse_int(query.get("pageSize"), DEFAULT_PAGE_SIZE),
            q=str(query.get("q") or ""),
        )

    def to_query(self) -> Dict[str, str]:
        query: Dict[str, str] = {}
        if self.page != DEFAULT_PAGE:
            query["page"] = str(self.page)
        if self.page_size != DEFAULT_PAGE_SIZE:
            query["pageSize"] = str(self.page_size)
        if self.q:
            query["q"] = self.q
        return query

    def to_input(self) -> Dict[str, Any]:
        """Full procedure input, defaults included."""
        return {"page": self.page, "pageSize": self.page_size, "q": self.q}

    def with_query(self, q: str) -> "PostsParams":
        # a new search always starts from the first page
        return replace(self, q=q, page=DEFAULT_PAGE)

    def with_page(self, page: int) -> "PostsParams":
        return replace(self, page=page)

    def with_page_size(self, page_size: int) -> "PostsParams":
        return replace(self, page_size=page_size, page=DEFAULT_PAGE)
