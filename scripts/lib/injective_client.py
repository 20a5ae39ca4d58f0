"""
HTTP clients for the Injective LCD, explorer indexer and NFT catalog APIs.

This module provides thin JSON clients that build endpoint URLs, apply a
per-call timeout and convert every transport or decode failure into an
InjectiveAPIError. Requests are never retried.
"""

import base64
import json
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .models import MARKETPLACE_CONTRACT


DEFAULT_TIMEOUT = 30.0  # seconds
CATALOG_PAGE_LIMIT = 100


def encode_smart_query(query: Dict[str, Any]) -> str:
    """
    Encode a CosmWasm smart query for use as a URL path segment.

    The query is serialized compactly, base64 encoded and percent-quoted
    so that "/" and "+" survive in the path.

    Examples:
        encode_smart_query({"all_sell_orders": {}})
        -> "eyJhbGxfc2VsbF9vcmRlcnMiOnt9fQ=="
    """
    raw = json.dumps(query, separators=(",", ":")).encode("utf-8")
    return quote(base64.b64encode(raw).decode("ascii"), safe="=")


class InjectiveAPIError(Exception):
    """Exception raised for failed or undecodable API calls."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class _JSONClient:
    """Shared GET-and-decode logic."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _sanitize_error_message(self, message: str) -> str:
        return message

    def _check_status(self, response: requests.Response) -> None:
        if response.status_code >= 400:
            raise InjectiveAPIError(
                f"HTTP error: {response.status_code}",
                status_code=response.status_code,
            )

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                 headers: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Full endpoint URL
            params: Optional query parameters
            headers: Optional request headers

        Returns:
            The decoded JSON document

        Raises:
            InjectiveAPIError: On transport failure, non-2xx status or invalid JSON
        """
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            sanitized_msg = self._sanitize_error_message(str(e))
            raise InjectiveAPIError(f"Request failed: {sanitized_msg}") from e

        self._check_status(response)

        try:
            return response.json()
        except ValueError as e:
            raise InjectiveAPIError(
                "Invalid JSON response", status_code=response.status_code
            ) from e


class InjectiveClient(_JSONClient):
    """
    Client for the chain LCD (rpc) endpoint and the explorer indexer.

    All methods return the raw decoded JSON; interpretation is left to
    the resolvers.
    """

    def __init__(
        self,
        rpc_url: str,
        indexer_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            rpc_url: LCD base URL (e.g. https://lcd.injective.network)
            indexer_url: Explorer indexer base URL
            timeout: Per-request timeout in seconds
            session: Optional requests session to reuse
        """
        super().__init__(timeout=timeout, session=session)
        self.rpc_url = rpc_url.rstrip("/")
        self.indexer_url = indexer_url.rstrip("/")

    def smart_query_url(self, contract_address: str, query: Dict[str, Any]) -> str:
        encoded = encode_smart_query(query)
        return f"{self.rpc_url}/cosmwasm/wasm/v1/contract/{contract_address}/smart/{encoded}"

    def smart_query(self, contract_address: str, query: Dict[str, Any]) -> Any:
        """Run a CosmWasm smart query against a contract."""
        return self.get_json(self.smart_query_url(contract_address, query))

    def get_all_sell_orders(self, marketplace_contract: str = MARKETPLACE_CONTRACT) -> Any:
        return self.smart_query(marketplace_contract, {"all_sell_orders": {}})

    def get_owned_tokens(self, contract_address: str, owner: str) -> Any:
        """Query a cw721 contract for the token ids held by an owner."""
        return self.smart_query(contract_address, {"tokens": {"owner": owner}})

    def get_bank_balances(self, address: str) -> Any:
        return self.get_json(f"{self.rpc_url}/cosmos/bank/v1beta1/balances/{address}")

    def get_account_txs(self, address: str) -> Any:
        return self.get_json(f"{self.indexer_url}/api/explorer/v1/accountTxs/{address}")


class CatalogClient(_JSONClient):
    """Client for the API-key protected NFT catalog."""

    def __init__(
        self,
        catalog_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(timeout=timeout, session=session)
        self.catalog_url = catalog_url.rstrip("/")
        self.api_key = api_key

    def _sanitize_error_message(self, message: str) -> str:
        """Remove API key from error messages to prevent credential leakage."""
        return message.replace(self.api_key, "[REDACTED]")

    def _check_status(self, response: requests.Response) -> None:
        if response.status_code in (401, 403):
            raise InjectiveAPIError("Invalid API key", status_code=response.status_code)
        super()._check_status(response)

    def get_tokens(self, address: str) -> Any:
        """Fetch the first page of tokens held by an address."""
        return self.get_json(
            f"{self.catalog_url}/tokens/{address}",
            params={"offset": 0, "limit": CATALOG_PAGE_LIMIT},
            headers={"x-api-key": self.api_key},
        )
