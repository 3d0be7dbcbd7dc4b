"""
Access gate in front of the feed. Three stages, strictly in order:

1. age confirmation (stored in client-local storage under "age_verified")
2. wallet connection through an injected EIP-1193 provider (provider.request(method, params))
3. token balance >= required_balance, always read from the Chain Query Service

The feed is reachable only after stage 3 passes. Nothing a caller sets directly can mark the
balance as sufficient; check_balance() is the only writer of has_access.
"""
import enum
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, MutableMapping

from app.services.chain import ChainQueryError

logger = logging.getLogger(__name__)

AGE_VERIFIED_KEY = "age_verified"

# EIP-1193 / wallet error codes
USER_REJECTED_REQUEST = 4001
UNRECOGNIZED_CHAIN = 4902


class WalletProviderError(Exception):
    """Error raised by a wallet provider request (EIP-1193 ProviderRpcError)."""

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"Wallet error {code}")
        self.code = code


class AccessGateError(Exception):
    pass


class AgeNotConfirmedError(AccessGateError):
    pass


class NoWalletProviderError(AccessGateError):
    def __init__(self):
        super().__init__("Please install MetaMask or Coinbase Wallet")


class WalletRejectedError(AccessGateError):
    def __init__(self):
        super().__init__("Wallet connection request was rejected")


class GateStage(str, enum.Enum):
    AGE = "age"
    WALLET = "wallet"
    BALANCE = "balance"
    FEED = "feed"


@dataclass(frozen=True)
class WalletState:
    address: str | None = None
    balance: Decimal = Decimal(0)
    has_access: bool = False


def chain_id_hex(chain_id: int) -> str:
    return hex(chain_id)


def add_chain_params(chain_id: int, chain_name: str, rpc_url: str, explorer_url: str) -> dict:
    """Params for wallet_addEthereumChain."""
    return {
        "chainId": chain_id_hex(chain_id),
        "chainName": chain_name,
        "nativeCurrency": {"name": "Ethereum", "symbol": "ETH", "decimals": 18},
        "rpcUrls": [rpc_url],
        "blockExplorerUrls": [explorer_url] if explorer_url else [],
    }


class AccessGate:
    def __init__(
        self,
        storage: MutableMapping[str, str],
        provider: Any | None,
        chain,
        *,
        token_address: str,
        required_balance: Decimal | float | int,
        chain_id: int,
        chain_params: dict | None = None,
    ):
        self._storage = storage
        self._provider = provider
        self._chain = chain
        self.token_address = token_address
        self.required_balance = Decimal(str(required_balance))
        self.chain_id = chain_id
        self.chain_params = chain_params or {"chainId": chain_id_hex(chain_id)}
        self._wallet = WalletState()
        self.error: str | None = None

    @property
    def wallet(self) -> WalletState:
        return self._wallet

    # Stage 1

    @property
    def age_verified(self) -> bool:
        return self._storage.get(AGE_VERIFIED_KEY) == "true"

    def confirm_age(self, agreed: bool) -> bool:
        """Checkbox + submit. Only an explicit agreement is persisted."""
        if agreed:
            self._storage[AGE_VERIFIED_KEY] = "true"
        return self.age_verified

    # Stage 2

    def connect_wallet(self) -> WalletState:
        """Request accounts, switch to the configured chain, then check the balance."""
        if not self.age_verified:
            raise AgeNotConfirmedError("Age confirmation required before connecting a wallet")
        self.error = None
        if self._provider is None:
            self.error = str(NoWalletProviderError())
            raise NoWalletProviderError()
        try:
            accounts = self._provider.request("eth_requestAccounts", [])
        except WalletProviderError as e:
            if e.code == USER_REJECTED_REQUEST:
                self.error = str(WalletRejectedError())
                raise WalletRejectedError() from e
            self.error = str(e)
            raise
        if not accounts:
            self.error = str(WalletRejectedError())
            raise WalletRejectedError()
        try:
            self.switch_chain()
        except WalletProviderError as e:
            if e.code == USER_REJECTED_REQUEST:
                self.error = str(WalletRejectedError())
                raise WalletRejectedError() from e
            self.error = str(e)
            raise
        self._wallet = WalletState(address=accounts[0])
        return self.check_balance()

    def switch_chain(self) -> None:
        """Switch the wallet to chain_id, adding the chain first if the wallet does not know it."""
        try:
            self._provider.request("wallet_switchEthereumChain", [{"chainId": chain_id_hex(self.chain_id)}])
        except WalletProviderError as e:
            if e.code != UNRECOGNIZED_CHAIN:
                raise
            logger.info("Chain %s unknown to wallet; adding it", self.chain_id)
            self._provider.request("wallet_addEthereumChain", [self.chain_params])

    # Stage 3

    def check_balance(self) -> WalletState:
        """Re-derive balance and access from the chain. A failed query leaves access denied."""
        if not self.wallet.address:
            raise AccessGateError("No wallet connected")
        address = self._wallet.address
        try:
            balance = self._chain.token_balance(self.token_address, address)
        except ChainQueryError as e:
            logger.error("Error checking balance for %s: %s", address, e)
            self.error = "Failed to check token balance"
            self._wallet = WalletState(address=address)
            return self._wallet
        self._wallet = WalletState(address=address, balance=balance, has_access=balance >= self.required_balance)
        return self._wallet

    # Whole gate

    @property
    def stage(self) -> GateStage:
        if not self.age_verified:
            return GateStage.AGE
        if not self.wallet.address:
            return GateStage.WALLET
        if not self.wallet.has_access:
            return GateStage.BALANCE
        return GateStage.FEED

    @property
    def can_enter_feed(self) -> bool:
        return self.stage is GateStage.FEED

    def resume(self) -> GateStage:
        """On page load: reuse an account the wallet still reports as connected. No polling."""
        if self.age_verified and self._provider is not None:
            accounts = self._provider.request("eth_accounts", [])
            if accounts:
                self._wallet = WalletState(address=accounts[0])
                self.check_balance()
        return self.stage

    def disconnect(self) -> None:
        self._wallet = WalletState()
