from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fastapi import Query

MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def clamp(page: int, limit: int) -> PageParams:
    return PageParams(page=max(1, page), limit=max(1, min(MAX_LIMIT, limit)))


def page_params(default_limit: int) -> Callable[..., PageParams]:
    """Build a dependency reading `page`/`limit` query params, clamped to 1..100."""

    def _dependency(
        page: int = Query(default=1),
        limit: int = Query(default=default_limit),
    ) -> PageParams:
        return clamp(page, limit)

    return _dependency
