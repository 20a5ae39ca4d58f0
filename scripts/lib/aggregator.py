"""
Per-address eligibility aggregation.

The aggregator merges the sell-order index with the live resolvers into
one EligibilityRecord per address and keeps only eligible records.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .models import EligibilityRecord, RegisteredAddress, TrackedCollections
from .rate_limiter import BatchRateLimiter
from .resolvers import (
    BalanceResolver,
    BaseOwnershipResolver,
    ParticipationResolver,
    SellOrderIndex,
    log,
    sell_order_collections,
)


@dataclass
class ScanReport:
    """Eligible records in scan order, plus scan counters."""

    records: List[EligibilityRecord] = field(default_factory=list)
    scanned: int = 0

    @property
    def retained(self) -> int:
        return len(self.records)


class EligibilityAggregator:
    """
    Evaluates addresses one at a time against all signal sources.

    Evaluation order per address:
    1. collections listed in the sell-order index
    2. live ownership lookup for the remaining collections
    3. native balance
    4. protocol participation, only when the balance is positive
    """

    def __init__(
        self,
        sell_orders: SellOrderIndex,
        tracked: TrackedCollections,
        ownership: BaseOwnershipResolver,
        balance: BalanceResolver,
        participation: ParticipationResolver,
        rate_limiter: Optional[BatchRateLimiter] = None,
    ):
        self.sell_orders = sell_orders
        self.tracked = tracked
        self.ownership = ownership
        self.balance = balance
        self.participation = participation
        self.rate_limiter = rate_limiter

    def evaluate(self, address: str) -> EligibilityRecord:
        """
        Build the record for a single address.

        Args:
            address: Account address

        Returns:
            EligibilityRecord, eligible or not
        """
        record = EligibilityRecord(address=address)

        record.collections |= sell_order_collections(self.sell_orders, address, self.tracked)
        record.collections |= self.ownership.resolve(address, known=frozenset(record.collections))

        record.balance = self.balance.resolve(address)
        if record.balance > 0:
            flags = self.participation.resolve(address)
            record.exchange_flag = flags.exchange
            record.vault_flag = flags.vault

        return record

    def scan(self, registered: Iterable[RegisteredAddress]) -> ScanReport:
        """
        Evaluate every registered address and keep the eligible ones.

        Args:
            registered: Rows from the input sheet, in order

        Returns:
            ScanReport with eligible records in scan order
        """
        report = ScanReport()

        for row in registered:
            record = self.evaluate(row.address)
            report.scanned += 1

            if record.is_eligible:
                report.records.append(record)
                log(
                    row.address,
                    f"Eligible: collections={self.tracked.ordered(record.collections)} "
                    f"exchange={record.exchange_flag} vault={record.vault_flag}",
                )

            if self.rate_limiter is not None:
                self.rate_limiter.tick()

        return report
