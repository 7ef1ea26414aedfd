from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.wallet_entity import (
    TransactionType,
    Wallet,
    WalletStats,
    WalletTransaction,
)


class IWalletRepo(ABC):
    """
    Balance changes and ledger rows are written through the same unit of work;
    the caller commits both together.
    """

    @abstractmethod
    async def get_by_user_id(self, *, user_id: int) -> Optional[Wallet]:
        pass

    @abstractmethod
    async def get_or_create(self, *, user_id: int) -> Wallet:
        pass

    @abstractmethod
    async def credit(self, *, wallet_id: int, amount: Decimal) -> Wallet:
        pass

    @abstractmethod
    async def debit_if_sufficient(self, *, wallet_id: int, amount: Decimal) -> Optional[Wallet]:
        """Conditional debit; None when the available balance no longer covers amount"""
        pass

    @abstractmethod
    async def add_transaction(self, *, transaction: WalletTransaction) -> WalletTransaction:
        pass

    @abstractmethod
    async def list_transactions(
        self,
        *,
        wallet_id: int,
        page: PageRequest,
        type: Optional[TransactionType] = None,
    ) -> Page[WalletTransaction]:
        pass

    @abstractmethod
    async def get_stats(self, *, wallet_id: int) -> WalletStats:
        pass
