"""
Base service class.

Provides common functionality for all ledger services including session
management, logging, and helper decorators.
"""

import functools
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_ledger.utils.exceptions import ConflictAlready, NotFound


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Conditional update outcome checks
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback current transaction."""
        await self.session.rollback()

    async def ensure_transitioned(
        self,
        updated: int,
        repo: Any,
        entity_id: int,
        entity_name: str,
    ) -> None:
        """
        Interpret the row count of a conditional status update.

        Args:
            updated: Rows affected by the conditional UPDATE
            repo: Repository of the updated entity
            entity_id: Entity ID
            entity_name: Name used in error messages

        Raises:
            NotFound: If the entity does not exist
            ConflictAlready: If it exists but was not in an allowed status
        """
        if updated:
            return

        entity = await repo.get_by_id(entity_id)
        if entity is None:
            raise NotFound(f"{entity_name} {entity_id} not found")

        raise ConflictAlready(
            f"{entity_name} {entity_id} is {entity.status}, "
            f"transition not allowed"
        )


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to wrap method in transaction with automatic commit/rollback.

    Commits on success, rolls back on exception.

    Usage:
        @transaction
        async def approve_commission(self, ...):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
            return result
        except Exception as e:
            await self.rollback()
            self.logger.error(
                f"Transaction failed in {func.__name__}",
                extra={
                    "error": str(e),
                    "function": func.__name__,
                },
                exc_info=True,
            )
            raise

    return wrapper
