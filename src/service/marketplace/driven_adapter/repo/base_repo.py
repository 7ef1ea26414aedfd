from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Callable, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.service.marketplace.app.dto.page import Page, PageRequest


T = TypeVar('T')


class SessionRepo:
    """
    Session plumbing shared by the repository implementations.

    Inside a unit of work the repository receives the UoW session and never commits.
    Repositories resolved straight from the container only get a session_factory and
    are used for reads.
    """

    def __init__(
        self,
        *,
        session: AsyncSession | None = None,
        session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None,
    ) -> None:
        self.session = session
        self.session_factory = session_factory

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    async def _paginate(
        session: AsyncSession,
        stmt: Select,
        page: PageRequest,
        mapper: Callable[[Any], T],
        *,
        scalars: bool = True,
    ) -> Page[T]:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await session.execute(count_stmt)).scalar_one()

        result = await session.execute(stmt.limit(page.limit).offset(page.offset))
        rows = result.scalars().all() if scalars else result.all()
        return Page(
            items=[mapper(row) for row in rows], total=total, page=page.page, limit=page.limit
        )
