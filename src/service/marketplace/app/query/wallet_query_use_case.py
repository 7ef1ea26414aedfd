from decimal import Decimal
from typing import List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_wallet_repo import IWalletRepo
from src.service.marketplace.domain.entity.wallet_entity import (
    TransactionType,
    Wallet,
    WalletStats,
    WalletTransaction,
)


RECENT_TRANSACTIONS = 10

EMPTY_STATS = WalletStats(
    total_deposits=Decimal('0.00'),
    total_purchases=Decimal('0.00'),
    total_transfers_in=Decimal('0.00'),
    total_transfers_out=Decimal('0.00'),
    transaction_count=0,
)


@attrs.define(frozen=True)
class WalletOverview:
    wallet: Wallet
    recent_transactions: List[WalletTransaction]


class WalletQueryUseCase:
    """Read side of the wallet; users without a wallet see an empty one."""

    def __init__(self, *, wallet_repo: IWalletRepo) -> None:
        self.wallet_repo = wallet_repo

    @classmethod
    @inject
    def depends(cls, wallet_repo: IWalletRepo = Depends(Provide[Container.wallet_repo])) -> Self:
        return cls(wallet_repo=wallet_repo)

    @Logger.io
    async def get_wallet(self, *, user_id: int) -> WalletOverview:
        wallet = await self.wallet_repo.get_by_user_id(user_id=user_id)
        if wallet is None or wallet.id is None:
            return WalletOverview(wallet=Wallet(user_id=user_id), recent_transactions=[])
        recent = await self.wallet_repo.list_transactions(
            wallet_id=wallet.id, page=PageRequest.of(page=1, limit=RECENT_TRANSACTIONS)
        )
        return WalletOverview(wallet=wallet, recent_transactions=recent.items)

    @Logger.io
    async def list_transactions(
        self, *, user_id: int, page: PageRequest, type: Optional[TransactionType] = None
    ) -> Page[WalletTransaction]:
        wallet = await self.wallet_repo.get_by_user_id(user_id=user_id)
        if wallet is None or wallet.id is None:
            return Page(items=[], total=0, page=page.page, limit=page.limit)
        return await self.wallet_repo.list_transactions(wallet_id=wallet.id, page=page, type=type)

    @Logger.io
    async def get_stats(self, *, user_id: int) -> WalletStats:
        wallet = await self.wallet_repo.get_by_user_id(user_id=user_id)
        if wallet is None or wallet.id is None:
            return EMPTY_STATS
        return await self.wallet_repo.get_stats(wallet_id=wallet.id)
