"""
Chain Query Service: read an ERC-20 balance over Ethereum JSON-RPC (eth_call) with httpx.
Only two read-only calls are needed: decimals() and balanceOf(address).
"""
import logging
import re
from decimal import Decimal
from itertools import count

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
# 4-byte selectors: keccak256("decimals()"), keccak256("balanceOf(address)")
DECIMALS_SELECTOR = "0x313ce567"
BALANCE_OF_SELECTOR = "0x70a08231"


class ChainQueryError(Exception):
    """RPC endpoint unreachable or returned an error / malformed result."""


def is_address(value: str) -> bool:
    return bool(value and ADDRESS_RE.match(value))


def encode_balance_of(owner: str) -> str:
    if not is_address(owner):
        raise ValueError(f"Invalid address: {owner!r}")
    return BALANCE_OF_SELECTOR + owner[2:].lower().rjust(64, "0")


def decode_uint(result: str) -> int:
    if not isinstance(result, str) or not result.startswith("0x"):
        raise ChainQueryError(f"Unexpected eth_call result: {result!r}")
    if result == "0x":
        raise ChainQueryError("Empty eth_call result (not a contract?)")
    try:
        return int(result, 16)
    except ValueError as e:
        raise ChainQueryError(f"Non-hex eth_call result: {result!r}") from e


def normalize_units(raw: int, decimals: int) -> Decimal:
    """Same as ethers.formatUnits: raw / 10**decimals."""
    return Decimal(raw) / (Decimal(10) ** decimals)


class ChainQueryService:
    def __init__(self, rpc_url: str, timeout: float = 10.0, client: httpx.Client | None = None):
        self.rpc_url = rpc_url
        self._client = client or httpx.Client(timeout=timeout)
        self._ids = count(1)

    def _rpc(self, method: str, params: list):
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            res = self._client.post(self.rpc_url, json=payload)
            res.raise_for_status()
            data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("RPC %s to %s failed: %s", method, self.rpc_url, e)
            raise ChainQueryError(f"RPC {method} failed: {e}") from e
        if not isinstance(data, dict):
            logger.warning("RPC %s returned a non-object body: %r", method, data)
            raise ChainQueryError(f"RPC {method} returned a malformed reply")
        if data.get("error"):
            logger.warning("RPC %s returned error: %s", method, data["error"])
            raise ChainQueryError(f"RPC {method} error: {data['error']}")
        return data.get("result")

    def eth_call(self, to: str, data: str) -> str:
        return self._rpc("eth_call", [{"to": to, "data": data}, "latest"])

    def token_decimals(self, token: str) -> int:
        return decode_uint(self.eth_call(token, DECIMALS_SELECTOR))

    def raw_balance(self, token: str, owner: str) -> int:
        return decode_uint(self.eth_call(token, encode_balance_of(owner)))

    def token_balance(self, token: str, owner: str) -> Decimal:
        """Balance of owner normalized by the token's declared decimals."""
        decimals = self.token_decimals(token)
        return normalize_units(self.raw_balance(token, owner), decimals)

    def close(self) -> None:
        self._client.close()


_chain_service: ChainQueryService | None = None


def get_chain_service() -> ChainQueryService:
    """FastAPI dependency: one pooled httpx client per process."""
    global _chain_service
    if _chain_service is None:
        settings = get_settings()
        _chain_service = ChainQueryService(settings.chain_rpc_url, timeout=settings.chain_timeout_seconds)
    return _chain_service


def close_chain_service() -> None:
    global _chain_service
    if _chain_service is not None:
        _chain_service.close()
        _chain_service = None
