from decimal import Decimal

from prometheus_client import Counter, Histogram


class MarketplaceMetrics:
    """
    VoltBay business metrics exposed on /metrics

    Bids and payments are the contended paths, so their outcomes are labelled
    by result to make lost races and gateway declines visible.
    """

    def __init__(self) -> None:
        # ========== Auction ==========
        self.bids_placed = Counter(
            'voltbay_bids_placed_total',
            'Bid placement attempts',
            ['result'],  # accepted / bid_too_low / auction_closed / self_bid / not_found
        )
        self.auctions_settled = Counter(
            'voltbay_auctions_settled_total',
            'Auctions moved out of the active state',
            ['outcome'],  # ended / expired
        )

        # ========== Payment ==========
        self.payment_intents_created = Counter(
            'voltbay_payment_intents_created_total',
            'Payment intents created',
            ['purpose'],  # fixed_price / buy_now / auction_win
        )
        self.payment_confirmations = Counter(
            'voltbay_payment_confirmations_total',
            'Payment confirmation outcomes',
            ['result'],  # succeeded / failed / canceled / refunded
        )
        self.payment_amount = Histogram(
            'voltbay_payment_amount',
            'Amount of confirmed payments in currency units',
            buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000, 100000],
        )

        # ========== Wallet ==========
        self.wallet_transactions = Counter(
            'voltbay_wallet_transactions_total',
            'Wallet ledger entries written',
            ['type', 'result'],
        )

    def record_bid(self, *, result: str) -> None:
        self.bids_placed.labels(result=result).inc()

    def record_auction_settled(self, *, outcome: str) -> None:
        self.auctions_settled.labels(outcome=outcome).inc()

    def record_payment_intent(self, *, purpose: str) -> None:
        self.payment_intents_created.labels(purpose=purpose).inc()

    def record_payment_confirmation(self, *, result: str, amount: Decimal | None = None) -> None:
        self.payment_confirmations.labels(result=result).inc()
        if amount is not None and result == 'succeeded':
            self.payment_amount.observe(float(amount))

    def record_wallet_transaction(self, *, type: str, result: str) -> None:
        self.wallet_transactions.labels(type=type, result=result).inc()


# Global metrics instance
metrics = MarketplaceMetrics()
