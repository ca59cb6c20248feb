"""
Tenant lookups against the persistence layer.

Provides the two access paths migration runs need: a single tenant by key
(failing when absent) and forward-only traversal of all tenants in batches.
"""

from typing import Any, Generic, Iterator, List, Type, TypeVar

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Query, Session

from ..exceptions import not_found
from ..utils.logger import get_logger

T = TypeVar("T")


class TenantRepository(Generic[T]):
    """Reads tenant entities of one mapped model through a session."""

    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model
        self.logger = get_logger()

    def new_query(self) -> Query:
        return self.session.query(self.model)

    def find_or_fail(self, key: Any) -> T:
        """
        Get a tenant by primary key.

        Raises:
            TenantNotFoundError: If no tenant has this key
        """
        entity = self.session.get(self.model, key)
        if entity is None:
            raise not_found(self.model.__name__, key=key)
        return entity

    def chunk(self, size: int) -> Iterator[List[T]]:
        """
        Yield tenants in batches of ``size`` ordered by primary key.

        The next batch is only queried once the consumer asks for it, so at
        most one batch is held in memory.
        """
        if size < 1:
            raise ValueError("chunk size must be at least 1")

        order_by = list(sa_inspect(self.model).primary_key)
        page = 0

        while True:
            batch = self.new_query().order_by(*order_by).offset(page * size).limit(size).all()
            if not batch:
                return

            self.logger.debug(
                "Fetched tenant batch",
                extra={"model": self.model.__name__, "page": page, "count": len(batch)},
            )
            yield batch

            if len(batch) < size:
                return
            page += 1
