"""
Unit tests for the wallet ledger

Every balance change writes exactly one signed ledger row, so the balance always
equals the sum of the wallet's transactions.
"""

from decimal import Decimal
from typing import Callable

import pytest

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.service.marketplace.app.command.add_wallet_funds_use_case import AddWalletFundsUseCase
from src.service.marketplace.app.command.deduct_wallet_funds_use_case import (
    DeductWalletFundsUseCase,
)
from src.service.marketplace.app.command.transfer_wallet_funds_use_case import (
    TransferWalletFundsUseCase,
)
from src.service.marketplace.app.query.wallet_query_use_case import WalletQueryUseCase
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.domain.entity.wallet_entity import TransactionType
from src.service.marketplace.driven_adapter.gateway.mock_payment_gateway import (
    DECLINED_TEST_CARD,
    DEFAULT_TEST_CARD,
    MockPaymentGateway,
)
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork


@pytest.fixture
def add_funds(
    uow: InMemoryUnitOfWork, payment_gateway: MockPaymentGateway, test_settings: Settings
) -> AddWalletFundsUseCase:
    return AddWalletFundsUseCase(uow=uow, payment_gateway=payment_gateway, settings=test_settings)


@pytest.fixture
def deduct(uow: InMemoryUnitOfWork) -> DeductWalletFundsUseCase:
    return DeductWalletFundsUseCase(uow=uow)


@pytest.fixture
def transfer(uow: InMemoryUnitOfWork) -> TransferWalletFundsUseCase:
    return TransferWalletFundsUseCase(uow=uow)


@pytest.fixture
def wallet_query(uow: InMemoryUnitOfWork) -> WalletQueryUseCase:
    return WalletQueryUseCase(wallet_repo=uow.wallet_repo)


async def _assert_no_drift(uow: InMemoryUnitOfWork, user_id: int) -> None:
    wallet = await uow.wallet_repo.get_by_user_id(user_id=user_id)
    assert wallet is not None and wallet.id is not None
    assert wallet.balance == uow.wallet_repo.ledger_sum(wallet_id=wallet.id)


@pytest.mark.unit
class TestAddFunds:
    @pytest.mark.asyncio
    async def test_deposit_creates_wallet_and_ledger_row(
        self, add_funds: AddWalletFundsUseCase, uow: InMemoryUnitOfWork, create_user: Callable
    ) -> None:
        buyer = await create_user(role=UserRole.BUYER)

        result = await add_funds.execute(
            user_id=buyer.id, amount=Decimal('250'), payment_method_id=DEFAULT_TEST_CARD
        )

        assert result.wallet.balance == Decimal('250.00')
        assert result.transaction.type == TransactionType.DEPOSIT
        assert result.transaction.amount == Decimal('250.00')
        assert result.transaction.reference.startswith('pi_mock_')
        await _assert_no_drift(uow, buyer.id)

    @pytest.mark.asyncio
    async def test_declined_card_changes_nothing(
        self, add_funds: AddWalletFundsUseCase, uow: InMemoryUnitOfWork, create_user: Callable
    ) -> None:
        buyer = await create_user(role=UserRole.BUYER)

        with pytest.raises(DomainError) as exc_info:
            await add_funds.execute(
                user_id=buyer.id, amount=Decimal('250'), payment_method_id=DECLINED_TEST_CARD
            )

        assert exc_info.value.message == 'Your card was declined.'
        assert await uow.wallet_repo.get_by_user_id(user_id=buyer.id) is None

    @pytest.mark.asyncio
    async def test_below_minimum_is_refused(self, add_funds: AddWalletFundsUseCase) -> None:
        with pytest.raises(DomainError) as exc_info:
            await add_funds.execute(
                user_id=1, amount=Decimal('0.75'), payment_method_id=DEFAULT_TEST_CARD
            )

        assert exc_info.value.message == 'Minimum charge amount is $1.00'

    @pytest.mark.asyncio
    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5')])
    async def test_non_positive_amount_is_refused(
        self, add_funds: AddWalletFundsUseCase, amount: Decimal
    ) -> None:
        with pytest.raises(DomainError) as exc_info:
            await add_funds.execute(user_id=1, amount=amount, payment_method_id=DEFAULT_TEST_CARD)

        assert exc_info.value.message == 'Amount must be greater than 0'


@pytest.mark.unit
class TestPurchase:
    @pytest.mark.asyncio
    async def test_purchase_debits_and_records_negative_row(
        self,
        add_funds: AddWalletFundsUseCase,
        deduct: DeductWalletFundsUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
    ) -> None:
        buyer = await create_user(role=UserRole.BUYER)
        await add_funds.execute(
            user_id=buyer.id, amount=Decimal('100'), payment_method_id=DEFAULT_TEST_CARD
        )

        result = await deduct.execute(
            user_id=buyer.id, amount=Decimal('60.50'), reference='order:42'
        )

        assert result.wallet.balance == Decimal('39.50')
        assert result.transaction.type == TransactionType.PURCHASE
        assert result.transaction.amount == Decimal('-60.50')
        await _assert_no_drift(uow, buyer.id)

    @pytest.mark.asyncio
    async def test_insufficient_balance_leaves_ledger_untouched(
        self,
        add_funds: AddWalletFundsUseCase,
        deduct: DeductWalletFundsUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
    ) -> None:
        buyer = await create_user(role=UserRole.BUYER)
        await add_funds.execute(
            user_id=buyer.id, amount=Decimal('20'), payment_method_id=DEFAULT_TEST_CARD
        )

        with pytest.raises(DomainError) as exc_info:
            await deduct.execute(user_id=buyer.id, amount=Decimal('20.01'))

        assert exc_info.value.message == 'Insufficient available balance'
        wallet = await uow.wallet_repo.get_by_user_id(user_id=buyer.id)
        assert wallet is not None
        assert wallet.balance == Decimal('20.00')
        await _assert_no_drift(uow, buyer.id)

    @pytest.mark.asyncio
    async def test_user_without_wallet_cannot_purchase(
        self, deduct: DeductWalletFundsUseCase, create_user: Callable
    ) -> None:
        buyer = await create_user(role=UserRole.BUYER)

        with pytest.raises(DomainError):
            await deduct.execute(user_id=buyer.id, amount=Decimal('1'))


@pytest.mark.unit
class TestTransfer:
    @pytest.mark.asyncio
    async def test_transfer_moves_funds_with_paired_rows(
        self,
        add_funds: AddWalletFundsUseCase,
        transfer: TransferWalletFundsUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
    ) -> None:
        sender = await create_user(role=UserRole.BUYER)
        recipient = await create_user(role=UserRole.SELLER)
        await add_funds.execute(
            user_id=sender.id, amount=Decimal('300'), payment_method_id=DEFAULT_TEST_CARD
        )

        result = await transfer.execute(
            sender_id=sender.id, recipient_id=recipient.id, amount=Decimal('120')
        )

        assert result.sender_wallet.balance == Decimal('180.00')
        assert result.outgoing.amount == Decimal('-120.00')
        assert result.incoming.amount == Decimal('120.00')
        recipient_wallet = await uow.wallet_repo.get_by_user_id(user_id=recipient.id)
        assert recipient_wallet is not None
        assert recipient_wallet.balance == Decimal('120.00')
        await _assert_no_drift(uow, sender.id)
        await _assert_no_drift(uow, recipient.id)

    @pytest.mark.asyncio
    async def test_transfer_to_self_is_refused(
        self, transfer: TransferWalletFundsUseCase
    ) -> None:
        with pytest.raises(DomainError) as exc_info:
            await transfer.execute(sender_id=3, recipient_id=3, amount=Decimal('10'))

        assert exc_info.value.message == 'Cannot transfer to same user'

    @pytest.mark.asyncio
    async def test_unknown_recipient(
        self, transfer: TransferWalletFundsUseCase, create_user: Callable
    ) -> None:
        sender = await create_user(role=UserRole.BUYER)

        with pytest.raises(NotFoundError):
            await transfer.execute(sender_id=sender.id, recipient_id=999, amount=Decimal('10'))


@pytest.mark.unit
class TestWalletQueries:
    @pytest.mark.asyncio
    async def test_user_without_wallet_sees_empty_one(
        self, wallet_query: WalletQueryUseCase
    ) -> None:
        overview = await wallet_query.get_wallet(user_id=77)

        assert overview.wallet.balance == Decimal('0.00')
        assert overview.recent_transactions == []

    @pytest.mark.asyncio
    async def test_stats_report_magnitudes(
        self,
        add_funds: AddWalletFundsUseCase,
        deduct: DeductWalletFundsUseCase,
        wallet_query: WalletQueryUseCase,
        create_user: Callable,
    ) -> None:
        buyer = await create_user(role=UserRole.BUYER)
        await add_funds.execute(
            user_id=buyer.id, amount=Decimal('100'), payment_method_id=DEFAULT_TEST_CARD
        )
        await add_funds.execute(
            user_id=buyer.id, amount=Decimal('50'), payment_method_id=DEFAULT_TEST_CARD
        )
        await deduct.execute(user_id=buyer.id, amount=Decimal('30'))

        stats = await wallet_query.get_stats(user_id=buyer.id)

        assert stats.total_deposits == Decimal('150.00')
        assert stats.total_purchases == Decimal('30.00')
        assert stats.transaction_count == 3

        overview = await wallet_query.get_wallet(user_id=buyer.id)
        assert [t.type for t in overview.recent_transactions] == [
            TransactionType.PURCHASE,
            TransactionType.DEPOSIT,
            TransactionType.DEPOSIT,
        ]
