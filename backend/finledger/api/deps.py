"""Shared API dependencies."""

from fastapi import Query

from finledger.config import settings
from finledger.core.database import get_db
from finledger.core.security import get_current_user


class Pagination:
    """`page` / `limit` query parameters shared by paginated routes."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    ):
        self.page = page
        self.page_size = limit


__all__ = ["get_db", "get_current_user", "Pagination"]
