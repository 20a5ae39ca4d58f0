"""
Data models for Injective eligibility scanning.

This module defines the tracked collection configuration, the typed
decoders for each remote response shape, and the per-address
EligibilityRecord used for JSON output.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set


# Chain constants (Injective mainnet)
NATIVE_DENOM = "inj"
MARKETPLACE_CONTRACT = "inj1l9nh9wv24fktjvclc4zgrgyzees7rwdtx45f54"
VAULT_CONTRACT = "inj1vcqkkvqs7prqu70dpddfj7kqeqfdz5gg662qs3"
EXCHANGE_EVENT_NAMESPACE = "injective.exchange.v1beta1."
QUANT_CONTRACT = "inj1vtd54v4jm50etkjepgtnd7lykr79yvvah8gdgw"
NINJA_CONTRACT = "inj19ly43dgrr2vce8h02a8nw0qujwhrzm9yv8d75c"

# Output formats supported by EligibilityRecord.to_output
OUTPUT_FORMATS = ["addresses", "collections", "full"]


@dataclass(frozen=True)
class Collection:
    """An NFT collection tracked for eligibility."""

    contract_address: str
    name: str
    family_name: Optional[str] = None  # Catalog family name, defaults to name

    def matches_family(self, family: str) -> bool:
        """Check whether a catalog family name refers to this collection."""
        return (self.family_name or self.name).casefold() == family.casefold()


class TrackedCollections:
    """
    Immutable ordered mapping of contract address to collection.

    Iteration order is the configured order and is used to order the
    collection names of every EligibilityRecord.
    """

    def __init__(self, collections: Iterable[Collection]):
        by_address: Dict[str, Collection] = {}
        for collection in collections:
            if collection.contract_address in by_address:
                raise ValueError(
                    f"Duplicate collection contract: {collection.contract_address}"
                )
            by_address[collection.contract_address] = collection
        self._by_address = by_address

    def __iter__(self) -> Iterator[Collection]:
        return iter(self._by_address.values())

    def __len__(self) -> int:
        return len(self._by_address)

    def __contains__(self, contract_address: object) -> bool:
        return contract_address in self._by_address

    def name_for(self, contract_address: str) -> Optional[str]:
        collection = self._by_address.get(contract_address)
        return collection.name if collection else None

    def names_for(self, contract_addresses: Iterable[str]) -> Set[str]:
        """Map contract addresses to names, ignoring untracked contracts."""
        return {
            self._by_address[address].name
            for address in contract_addresses
            if address in self._by_address
        }

    def ordered(self, names: Iterable[str]) -> List[str]:
        """Return the given names in configured collection order."""
        wanted = set(names)
        return [c.name for c in self._by_address.values() if c.name in wanted]


DEFAULT_COLLECTIONS = TrackedCollections(
    [
        Collection(QUANT_CONTRACT, "quant"),
        Collection(NINJA_CONTRACT, "ninja"),
    ]
)


@dataclass(frozen=True)
class SellOrder:
    """An open marketplace listing."""

    owner: str
    contract_address: str

    @classmethod
    def from_json(cls, entry: Any) -> Optional["SellOrder"]:
        """Decode one order entry, returning None when it is malformed."""
        if not isinstance(entry, dict):
            return None
        owner = entry.get("owner")
        contract_address = entry.get("contract_address")
        if not isinstance(owner, str) or not isinstance(contract_address, str):
            return None
        if not owner or not contract_address:
            return None
        return cls(owner=owner, contract_address=contract_address)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


@dataclass
class SellOrdersResponse:
    """Decoded `all_sell_orders` smart query response."""

    orders: List[SellOrder]
    skipped: int = 0  # Malformed entries

    @classmethod
    def from_json(cls, payload: Any) -> "SellOrdersResponse":
        """
        Decode the response, skipping malformed order entries.

        Raises:
            ValueError: If the document itself does not have the
                `{"data": {"orders": [...]}}` shape
        """
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        data = payload.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("'data' is not an object")
        raw_orders = data.get("orders")
        if raw_orders is None:
            raw_orders = []
        if not isinstance(raw_orders, list):
            raise ValueError("'orders' is not a list")

        orders: List[SellOrder] = []
        skipped = 0
        for entry in raw_orders:
            order = SellOrder.from_json(entry)
            if order is None:
                skipped += 1
                continue
            orders.append(order)
        return cls(orders=orders, skipped=skipped)


@dataclass
class NftTokensResponse:
    """Decoded `tokens` smart query response of a cw721 contract."""

    ids: List[Any]

    @classmethod
    def from_json(cls, payload: Any) -> "NftTokensResponse":
        data = _as_dict(_as_dict(payload).get("data"))
        return cls(ids=_as_list(data.get("ids")))

    @property
    def has_tokens(self) -> bool:
        return len(self.ids) > 0


@dataclass
class BankBalance:
    denom: str
    amount: Optional[int]  # None when the amount is not a decimal string


@dataclass
class BankBalancesResponse:
    """Decoded bank balances listing."""

    balances: List[BankBalance]

    @classmethod
    def from_json(cls, payload: Any) -> "BankBalancesResponse":
        balances: List[BankBalance] = []
        for entry in _as_list(_as_dict(payload).get("balances")):
            if not isinstance(entry, dict) or not isinstance(entry.get("denom"), str):
                continue
            balances.append(BankBalance(entry["denom"], _parse_amount(entry.get("amount"))))
        return cls(balances=balances)

    def amount_of(self, denom: str) -> int:
        """
        Return the amount held in a denomination.

        The first entry with the denomination wins. Missing entries and
        malformed amounts both read as 0.
        """
        for balance in self.balances:
            if balance.denom == denom:
                return balance.amount or 0
        return 0


def _parse_amount(amount: Any) -> Optional[int]:
    if not isinstance(amount, str) or not amount.isascii() or not amount.isdigit():
        return None
    try:
        return int(amount)
    except ValueError:
        # Beyond the interpreter's integer string conversion limit
        return None


@dataclass
class AccountTx:
    """The fields of an indexer transaction used for participation checks."""

    first_message_contract: Optional[str]
    event_types: List[str]

    @classmethod
    def from_json(cls, entry: Any) -> "AccountTx":
        entry = _as_dict(entry)

        contract = None
        messages = _as_list(entry.get("messages"))
        if messages:
            first = _as_dict(messages[0])
            value = _as_dict(first.get("value"))
            contract = value.get("contract_address", first.get("contract_address"))
            if not isinstance(contract, str):
                contract = None

        event_types: List[str] = []
        for log_entry in _as_list(entry.get("logs")):
            for event in _as_list(_as_dict(log_entry).get("events")):
                event_type = _as_dict(event).get("type")
                if isinstance(event_type, str):
                    event_types.append(event_type)

        return cls(first_message_contract=contract, event_types=event_types)


@dataclass
class AccountTxsResponse:
    """
    Indexer account transaction history.

    Entries are decoded lazily so a scan can stop early.
    """

    entries: List[Any]

    @classmethod
    def from_json(cls, payload: Any) -> "AccountTxsResponse":
        return cls(entries=_as_list(_as_dict(payload).get("data")))

    def __iter__(self) -> Iterator[AccountTx]:
        for entry in self.entries:
            yield AccountTx.from_json(entry)


@dataclass
class CatalogTokensResponse:
    """Decoded catalog token listing; only family names are kept."""

    family_names: List[str]

    @classmethod
    def from_json(cls, payload: Any) -> "CatalogTokensResponse":
        names: List[str] = []
        for token in _as_list(_as_dict(payload).get("tokens")):
            name = _as_dict(_as_dict(token).get("family")).get("name")
            if isinstance(name, str):
                names.append(name)
        return cls(family_names=names)


@dataclass
class RegisteredAddress:
    """One registration row from the input sheet."""

    identifier: str
    address: str


@dataclass
class SheetData:
    """
    Spreadsheet export used as input.

    Row 0 is a header. Column 0 is the registrant identifier and
    column 1 the address.
    """

    range: str
    major_dimension: str
    values: List[List[str]]

    @classmethod
    def from_json(cls, payload: Any) -> "SheetData":
        """
        Decode a sheet document.

        Raises:
            ValueError: If the document does not have the sheet shape
        """
        if not isinstance(payload, dict):
            raise ValueError("sheet document must be a JSON object")
        values = payload.get("values")
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise ValueError("'values' must be a list of rows")
        return cls(
            range=str(payload.get("range", "")),
            major_dimension=str(payload.get("majorDimension", "")),
            values=[[str(cell) for cell in row] for row in values],
        )

    def registered_addresses(self) -> List[RegisteredAddress]:
        """Return data rows in order, skipping the header and short rows."""
        return [
            RegisteredAddress(identifier=row[0], address=row[1])
            for row in self.values[1:]
            if len(row) >= 2
        ]


@dataclass
class EligibilityRecord:
    """
    Aggregated signals for one address.

    Collections merge sell-order listings and live ownership lookups.
    """

    address: str
    collections: Set[str] = field(default_factory=set)
    balance: int = 0  # Smallest denomination
    exchange_flag: bool = False
    vault_flag: bool = False

    @property
    def is_eligible(self) -> bool:
        """Balance alone does not qualify an address."""
        return bool(self.collections) or self.exchange_flag or self.vault_flag

    def to_output(
        self,
        output_format: str = "full",
        tracked: Optional[TrackedCollections] = None,
    ) -> Any:
        """
        Convert the record to its JSON output shape.

        Args:
            output_format: One of OUTPUT_FORMATS
            tracked: Collection order for the names (sorted if None)

        Returns:
            The address string, or a dict for the richer formats
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")

        names = tracked.ordered(self.collections) if tracked else sorted(self.collections)

        if output_format == "addresses":
            return self.address
        if output_format == "collections":
            return {"address": self.address, "collections": names}
        return {
            "address": self.address,
            "balance": self.balance,
            "collections": names,
            "exchange_flag": self.exchange_flag,
            "vault_flag": self.vault_flag,
        }

