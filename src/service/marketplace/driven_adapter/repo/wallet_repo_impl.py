from decimal import Decimal
from typing import Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_wallet_repo import IWalletRepo
from src.service.marketplace.domain.entity.wallet_entity import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletStats,
    WalletTransaction,
)
from src.service.marketplace.domain.money import to_money
from src.service.marketplace.driven_adapter.model.wallet_model import (
    WalletModel,
    WalletTransactionModel,
)
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class WalletRepoImpl(SessionRepo, IWalletRepo):
    @Logger.io
    async def get_by_user_id(self, *, user_id: int) -> Optional[Wallet]:
        async with self._get_session() as session:
            result = await session.execute(
                select(WalletModel)
                .where(WalletModel.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            wallet_model = result.scalar_one_or_none()
            return self._to_entity(wallet_model) if wallet_model else None

    @Logger.io
    async def get_or_create(self, *, user_id: int) -> Wallet:
        async with self._get_session() as session:
            # Concurrent first deposits race on the unique user_id; the loser reads the winner's row
            await session.execute(
                pg_insert(WalletModel)
                .values(user_id=user_id, balance=0, locked_balance=0)
                .on_conflict_do_nothing(index_elements=[WalletModel.user_id])
            )
            result = await session.execute(
                select(WalletModel)
                .where(WalletModel.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            return self._to_entity(result.scalar_one())

    @Logger.io
    async def credit(self, *, wallet_id: int, amount: Decimal) -> Wallet:
        stmt = (
            update(WalletModel)
            .where(WalletModel.id == wallet_id)
            .values(balance=WalletModel.balance + amount, updated_at=func.now())
            .returning(WalletModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._get_session() as session:
            return self._to_entity((await session.execute(stmt)).scalar_one())

    @Logger.io
    async def debit_if_sufficient(self, *, wallet_id: int, amount: Decimal) -> Optional[Wallet]:
        stmt = (
            update(WalletModel)
            .where(
                WalletModel.id == wallet_id,
                WalletModel.balance - WalletModel.locked_balance >= amount,
            )
            .values(balance=WalletModel.balance - amount, updated_at=func.now())
            .returning(WalletModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._get_session() as session:
            wallet_model = (await session.execute(stmt)).scalar_one_or_none()
            return self._to_entity(wallet_model) if wallet_model else None

    @Logger.io
    async def add_transaction(self, *, transaction: WalletTransaction) -> WalletTransaction:
        async with self._get_session() as session:
            transaction_model = WalletTransactionModel(
                wallet_id=transaction.wallet_id,
                type=transaction.type.value,
                amount=transaction.amount,
                status=transaction.status.value,
                description=transaction.description,
                reference=transaction.reference,
            )
            session.add(transaction_model)
            await session.flush()
            await session.refresh(transaction_model)
            return self._to_transaction(transaction_model)

    @Logger.io
    async def list_transactions(
        self,
        *,
        wallet_id: int,
        page: PageRequest,
        type: Optional[TransactionType] = None,
    ) -> Page[WalletTransaction]:
        stmt = select(WalletTransactionModel).where(WalletTransactionModel.wallet_id == wallet_id)
        if type is not None:
            stmt = stmt.where(WalletTransactionModel.type == type.value)
        stmt = stmt.order_by(
            WalletTransactionModel.created_at.desc(), WalletTransactionModel.id.desc()
        )
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_transaction)

    @Logger.io
    async def get_stats(self, *, wallet_id: int) -> WalletStats:
        def total_of(transaction_type: TransactionType):
            # Debits are stored negative; report magnitudes
            return func.coalesce(
                func.sum(
                    case(
                        (
                            WalletTransactionModel.type == transaction_type.value,
                            func.abs(WalletTransactionModel.amount),
                        ),
                        else_=0,
                    )
                ),
                0,
            )

        stmt = select(
            total_of(TransactionType.DEPOSIT),
            total_of(TransactionType.PURCHASE),
            total_of(TransactionType.TRANSFER_IN),
            total_of(TransactionType.TRANSFER_OUT),
            func.count(WalletTransactionModel.id),
        ).where(
            WalletTransactionModel.wallet_id == wallet_id,
            WalletTransactionModel.status == TransactionStatus.COMPLETED.value,
        )
        async with self._get_session() as session:
            deposits, purchases, transfers_in, transfers_out, count = (
                await session.execute(stmt)
            ).one()
        return WalletStats(
            total_deposits=to_money(deposits),
            total_purchases=to_money(purchases),
            total_transfers_in=to_money(transfers_in),
            total_transfers_out=to_money(transfers_out),
            transaction_count=count,
        )

    @staticmethod
    def _to_entity(wallet_model: WalletModel) -> Wallet:
        return Wallet(
            id=wallet_model.id,
            user_id=wallet_model.user_id,
            balance=wallet_model.balance,
            locked_balance=wallet_model.locked_balance,
            created_at=wallet_model.created_at,
            updated_at=wallet_model.updated_at,
        )

    @staticmethod
    def _to_transaction(transaction_model: WalletTransactionModel) -> WalletTransaction:
        return WalletTransaction(
            id=transaction_model.id,
            wallet_id=transaction_model.wallet_id,
            type=TransactionType(transaction_model.type),
            amount=transaction_model.amount,
            status=TransactionStatus(transaction_model.status),
            description=transaction_model.description,
            reference=transaction_model.reference,
            created_at=transaction_model.created_at,
        )
