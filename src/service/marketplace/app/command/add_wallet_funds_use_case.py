from decimal import Decimal
from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.interface.i_payment_gateway import IPaymentGateway
from src.service.marketplace.domain.entity.wallet_entity import (
    TransactionType,
    Wallet,
    WalletTransaction,
    validate_positive_amount,
)
from src.service.marketplace.domain.money import to_cents


@attrs.define(frozen=True)
class WalletOperationResult:
    wallet: Wallet
    transaction: WalletTransaction


class AddWalletFundsUseCase:
    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        payment_gateway: IPaymentGateway,
        settings: Settings,
    ) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.settings = settings

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, payment_gateway=payment_gateway, settings=settings)

    @Logger.io
    async def execute(
        self, *, user_id: int, amount: Decimal, payment_method_id: str
    ) -> WalletOperationResult:
        amount = validate_positive_amount(amount)
        minimum = self.settings.PAYMENT_MINIMUM_AMOUNT
        if amount < minimum:
            raise DomainError(f'Minimum charge amount is ${minimum:.2f}')

        intent = await self.payment_gateway.charge(
            amount_cents=to_cents(amount),
            currency=self.settings.PAYMENT_CURRENCY,
            payment_method_id=payment_method_id,
            metadata={'user_id': str(user_id), 'purpose': 'wallet_deposit'},
        )
        if not intent.succeeded:
            metrics.record_wallet_transaction(type=TransactionType.DEPOSIT, result='failed')
            raise DomainError(intent.last_error or 'Payment failed')

        async with self.uow:
            wallet = await self.uow.wallet_repo.get_or_create(user_id=user_id)
            if wallet.id is None:
                raise NotFoundError('Wallet not found')
            wallet = await self.uow.wallet_repo.credit(wallet_id=wallet.id, amount=amount)
            transaction = await self.uow.wallet_repo.add_transaction(
                transaction=WalletTransaction.record(
                    wallet_id=wallet.id,  # type: ignore[arg-type]
                    type=TransactionType.DEPOSIT,
                    amount=amount,
                    description='Wallet deposit',
                    reference=intent.id,
                )
            )
            await self.uow.commit()

        metrics.record_wallet_transaction(type=TransactionType.DEPOSIT, result='completed')
        Logger.base.info(f'💰 [WALLET] User {user_id} deposited ${amount} via {intent.id}')
        return WalletOperationResult(wallet=wallet, transaction=transaction)
