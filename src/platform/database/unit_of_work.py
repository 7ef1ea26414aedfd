"""
Unit of Work - one session and one transaction per use case call

- UoW opens a session on enter and closes it on exit
- UoW owns commit/rollback; repositories never commit
- Repositories obtained from the UoW share its session
- Anything not committed before exit is rolled back
"""

from __future__ import annotations

import abc
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.marketplace.app.interface.i_bid_repo import IBidRepo
    from src.service.marketplace.app.interface.i_category_repo import ICategoryRepo
    from src.service.marketplace.app.interface.i_enterprise_listing_repo import (
        IEnterpriseListingRepo,
    )
    from src.service.marketplace.app.interface.i_order_repo import IOrderRepo
    from src.service.marketplace.app.interface.i_payment_repo import IPaymentRepo
    from src.service.marketplace.app.interface.i_product_repo import IProductRepo
    from src.service.marketplace.app.interface.i_quote_repo import IQuoteRepo
    from src.service.marketplace.app.interface.i_user_repo import IUserRepo
    from src.service.marketplace.app.interface.i_wallet_repo import IWalletRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow:
            product = await uow.product_repo.get_by_id(product_id=product_id)
            await uow.order_repo.create(order=order)
            await uow.commit()
    """

    user_repo: IUserRepo
    product_repo: IProductRepo
    bid_repo: IBidRepo
    order_repo: IOrderRepo
    payment_repo: IPaymentRepo
    wallet_repo: IWalletRepo
    category_repo: ICategoryRepo
    enterprise_listing_repo: IEnterpriseListingRepo
    quote_repo: IQuoteRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None
        self._exit_stack: AsyncExitStack | None = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.marketplace.driven_adapter.repo.bid_repo_impl import BidRepoImpl
        from src.service.marketplace.driven_adapter.repo.category_repo_impl import (
            CategoryRepoImpl,
        )
        from src.service.marketplace.driven_adapter.repo.enterprise_listing_repo_impl import (
            EnterpriseListingRepoImpl,
        )
        from src.service.marketplace.driven_adapter.repo.order_repo_impl import OrderRepoImpl
        from src.service.marketplace.driven_adapter.repo.payment_repo_impl import PaymentRepoImpl
        from src.service.marketplace.driven_adapter.repo.product_repo_impl import ProductRepoImpl
        from src.service.marketplace.driven_adapter.repo.quote_repo_impl import QuoteRepoImpl
        from src.service.marketplace.driven_adapter.repo.user_repo_impl import UserRepoImpl
        from src.service.marketplace.driven_adapter.repo.wallet_repo_impl import WalletRepoImpl

        self._exit_stack = AsyncExitStack()
        self.session = await self._exit_stack.enter_async_context(self.session_factory())

        self.user_repo = UserRepoImpl(session=self.session)
        self.product_repo = ProductRepoImpl(session=self.session)
        self.bid_repo = BidRepoImpl(session=self.session)
        self.order_repo = OrderRepoImpl(session=self.session)
        self.payment_repo = PaymentRepoImpl(session=self.session)
        self.wallet_repo = WalletRepoImpl(session=self.session)
        self.category_repo = CategoryRepoImpl(session=self.session)
        self.enterprise_listing_repo = EnterpriseListingRepoImpl(session=self.session)
        self.quote_repo = QuoteRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._exit_stack is not None:
                await self._exit_stack.aclose()
            self._exit_stack = None
            self.session = None

    async def _commit(self) -> None:
        if self.session is None:
            raise RuntimeError('UnitOfWork used outside `async with`')
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
