"""
Signal resolvers for address eligibility.

Each signal has a pure interpretation function working on decoded JSON
and a resolver class that fetches the data through a client. Resolvers
treat per-address failures as soft: the error is logged and the zero
value of the signal is returned.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AbstractSet, Any, Dict, FrozenSet, Iterable, Optional, Set

from .injective_client import CatalogClient, InjectiveAPIError, InjectiveClient
from .models import (
    EXCHANGE_EVENT_NAMESPACE,
    NATIVE_DENOM,
    VAULT_CONTRACT,
    AccountTx,
    AccountTxsResponse,
    BankBalancesResponse,
    CatalogTokensResponse,
    NftTokensResponse,
    SellOrdersResponse,
    TrackedCollections,
)


SellOrderIndex = Dict[str, FrozenSet[str]]


def log(scope: str, message: str) -> None:
    """Log a message with a scope prefix."""
    print(f"[{scope}] {message}", file=sys.stderr)


def build_sell_order_index(payload: Any) -> SellOrderIndex:
    """
    Build the owner -> listed contracts mapping from `all_sell_orders`.

    Malformed order entries are skipped. An empty order list yields an
    empty index.

    Args:
        payload: Decoded sell order query response

    Returns:
        Mapping of owner address to the set of contracts listed

    Raises:
        ValueError: If the payload does not have the sell order shape
    """
    response = SellOrdersResponse.from_json(payload)
    if response.skipped:
        log("sell-orders", f"Skipped {response.skipped} malformed order(s)")

    index: Dict[str, Set[str]] = {}
    for order in response.orders:
        index.setdefault(order.owner, set()).add(order.contract_address)
    return {owner: frozenset(contracts) for owner, contracts in index.items()}


def fetch_sell_order_index(client: InjectiveClient) -> SellOrderIndex:
    """
    Fetch and index all open sell orders.

    Raises:
        InjectiveAPIError: The index is required, so request failures and
            a response of the wrong shape both propagate
    """
    payload = client.get_all_sell_orders()
    try:
        return build_sell_order_index(payload)
    except ValueError as e:
        raise InjectiveAPIError(f"Invalid sell order response: {e}") from e


def sell_order_collections(
    index: SellOrderIndex, address: str, tracked: TrackedCollections
) -> Set[str]:
    """Names of tracked collections the address has listed for sale."""
    return tracked.names_for(index.get(address, frozenset()))


def owns_tokens(payload: Any) -> bool:
    """A non-empty `data.ids` array is evidence of ownership."""
    return NftTokensResponse.from_json(payload).has_tokens


def native_balance(payload: Any, denom: str = NATIVE_DENOM) -> int:
    """Amount of `denom` in a bank balances listing, 0 when absent or malformed."""
    return BankBalancesResponse.from_json(payload).amount_of(denom)


def catalog_collections(payload: Any, tracked: TrackedCollections) -> Set[str]:
    """Names of tracked collections whose family appears in a catalog listing."""
    families = CatalogTokensResponse.from_json(payload).family_names
    return {
        collection.name
        for collection in tracked
        if any(collection.matches_family(family) for family in families)
    }


@dataclass
class ParticipationFlags:
    """Protocol participation derived from transaction history."""

    exchange: bool = False
    vault: bool = False


def participation_flags(
    txs: Iterable[AccountTx],
    vault_contract: str = VAULT_CONTRACT,
    exchange_namespace: str = EXCHANGE_EVENT_NAMESPACE,
) -> ParticipationFlags:
    """
    Derive exchange and vault flags in a single pass.

    Each flag stops being checked once true and the scan stops as soon
    as both are true.

    Args:
        txs: Transactions in indexer order
        vault_contract: Contract whose first-message calls mark vault use
        exchange_namespace: Event type substring of the exchange module

    Returns:
        ParticipationFlags
    """
    flags = ParticipationFlags()
    for tx in txs:
        if not flags.vault and tx.first_message_contract == vault_contract:
            flags.vault = True
        if not flags.exchange and any(exchange_namespace in t for t in tx.event_types):
            flags.exchange = True
        if flags.exchange and flags.vault:
            break
    return flags


class BaseOwnershipResolver(ABC):
    """
    Abstract base class for collection ownership resolvers.

    Subclasses return the names of tracked collections an address holds.
    """

    def __init__(self, tracked: TrackedCollections):
        self.tracked = tracked

    @abstractmethod
    def resolve(self, address: str, known: AbstractSet[str] = frozenset()) -> Set[str]:
        """
        Resolve collection ownership for an address.

        Args:
            address: Account address
            known: Collection names already matched, which need no lookup

        Returns:
            Names of owned tracked collections (empty on failure)
        """
        pass


class SmartQueryOwnershipResolver(BaseOwnershipResolver):
    """Resolves ownership with a `tokens` smart query per tracked contract."""

    def __init__(self, client: InjectiveClient, tracked: TrackedCollections):
        super().__init__(tracked)
        self.client = client

    def resolve(self, address: str, known: AbstractSet[str] = frozenset()) -> Set[str]:
        owned: Set[str] = set()
        try:
            for collection in self.tracked:
                if collection.name in known:
                    continue
                payload = self.client.get_owned_tokens(collection.contract_address, address)
                if owns_tokens(payload):
                    owned.add(collection.name)
        except InjectiveAPIError as e:
            # One failed contract discards the whole lookup
            log(address, f"NFT ownership lookup failed: {e}")
            return set()
        return owned


class CatalogOwnershipResolver(BaseOwnershipResolver):
    """Resolves ownership from the API-key catalog's token families."""

    def __init__(self, client: CatalogClient, tracked: TrackedCollections):
        super().__init__(tracked)
        self.client = client

    def resolve(self, address: str, known: AbstractSet[str] = frozenset()) -> Set[str]:
        try:
            payload = self.client.get_tokens(address)
        except InjectiveAPIError as e:
            log(address, f"Catalog lookup failed: {e}")
            return set()
        return catalog_collections(payload, self.tracked)


class BalanceResolver:
    """Resolves the native token balance of an address."""

    def __init__(self, client: InjectiveClient, denom: str = NATIVE_DENOM):
        self.client = client
        self.denom = denom

    def resolve(self, address: str) -> int:
        try:
            payload = self.client.get_bank_balances(address)
        except InjectiveAPIError as e:
            log(address, f"Balance lookup failed: {e}")
            return 0
        return native_balance(payload, self.denom)


class ParticipationResolver:
    """Resolves exchange and vault participation from indexer history."""

    def __init__(
        self,
        client: InjectiveClient,
        vault_contract: str = VAULT_CONTRACT,
        exchange_namespace: str = EXCHANGE_EVENT_NAMESPACE,
    ):
        self.client = client
        self.vault_contract = vault_contract
        self.exchange_namespace = exchange_namespace

    def resolve(self, address: str) -> ParticipationFlags:
        try:
            payload = self.client.get_account_txs(address)
        except InjectiveAPIError as e:
            log(address, f"Transaction history lookup failed: {e}")
            return ParticipationFlags()
        return participation_flags(
            AccountTxsResponse.from_json(payload),
            vault_contract=self.vault_contract,
            exchange_namespace=self.exchange_namespace,
        )


def create_ownership_resolver(
    client: InjectiveClient,
    tracked: TrackedCollections,
    catalog: Optional[CatalogClient] = None,
) -> BaseOwnershipResolver:
    """
    Factory function to create the ownership resolver for a deployment.

    Args:
        client: InjectiveClient for smart queries
        tracked: Collections to check
        catalog: CatalogClient, used instead of smart queries when given

    Returns:
        Appropriate resolver instance
    """
    if catalog is not None:
        return CatalogOwnershipResolver(catalog, tracked)
    return SmartQueryOwnershipResolver(client, tracked)
