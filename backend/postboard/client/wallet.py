"""Browser wallet connection.

The injected provider is whatever object the wallet extension exposes
(``window.ethereum`` in a browser): it carries identification flags such as
``isMetaMask`` and answers JSON-RPC calls through ``request(method, params)``.

Wallet login never reaches the server's credential checks; see
``AppState.wallet_login``.
"""

import logging
import re
from decimal import Decimal, InvalidOperation, localcontext

from pydantic import BaseModel

from postboard.client.notify import Notifier

logger = logging.getLogger(__name__)

WEI_PER_ETHER = 10**18
ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class WalletError(Exception):
    pass


class WalletResult(BaseModel):
    success: bool
    account: str | None = None
    error: str | None = None


class WalletDetector:
    """Decides whether an injected provider is a wallet we support."""

    name = "wallet"

    def detect(self, provider) -> bool:
        raise NotImplementedError

    def rejection(self, provider) -> str:
        """Human-readable reason ``provider`` was not accepted."""
        raise NotImplementedError


class MetaMaskDetector(WalletDetector):
    name = "MetaMask"

    # wallets that also set isMetaMask to pass as MetaMask
    IMPOSTOR_FLAGS = {
        "isPhantom": "Phantom",
        "isCoinbaseWallet": "Coinbase Wallet",
        "isBraveWallet": "Brave Wallet",
    }

    def impostor(self, provider) -> str | None:
        for flag, name in self.IMPOSTOR_FLAGS.items():
            if getattr(provider, flag, False):
                return name
        return None

    def detect(self, provider) -> bool:
        if provider is None:
            return False
        return bool(getattr(provider, "isMetaMask", False)) and not self.impostor(provider)

    def rejection(self, provider) -> str:
        if provider is None:
            return "MetaMask is not installed. Please install MetaMask to continue."
        impostor = self.impostor(provider)
        if impostor == "Phantom":
            return "Phantom wallet detected. Please install and use MetaMask instead."
        return "Please use MetaMask wallet. Other wallets are not supported."


def is_address(value: str) -> bool:
    return bool(ADDRESS_RE.match(value or ""))


def format_ether(wei: int) -> str:
    whole, frac = divmod(wei, WEI_PER_ETHER)
    frac_digits = f"{frac:018d}".rstrip("0") or "0"
    return f"{whole}.{frac_digits}"


def parse_ether(value: str) -> int:
    # 78 digits covers any uint256 wei amount without rounding
    with localcontext(prec=78):
        try:
            amount = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"Invalid ether amount: {value!r}")
        if not amount.is_finite() or amount < 0:
            raise ValueError(f"Invalid ether amount: {value!r}")
        wei = amount * WEI_PER_ETHER
        if wei != wei.to_integral_value():
            raise ValueError(f"Invalid ether amount: {value!r}")
    return int(wei)


class WalletConnection:
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"

    def __init__(
        self,
        provider=None,
        notifier: Notifier | None = None,
        detector: WalletDetector | None = None,
    ):
        self.provider = provider
        self.notifier = notifier or Notifier()
        self.detector = detector or MetaMaskDetector()
        self.status = self.DISCONNECTED
        self.account: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.status == self.CONNECTED

    @property
    def is_available(self) -> bool:
        return self.detector.detect(self.provider)

    def _fail(self, message: str) -> WalletResult:
        self.status = self.DISCONNECTED
        self.notifier.error(message)
        return WalletResult(success=False, error=message)

    def connect(self) -> WalletResult:
        if not self.is_available:
            reason = self.detector.rejection(self.provider)
            logger.info(f"Wallet rejected: {reason}")
            return self._fail(reason)

        self.status = self.CONNECTING
        try:
            accounts = self.provider.request("eth_requestAccounts")
        except Exception as exc:
            logger.warning(f"Wallet connection error: {exc}")
            return self._fail(str(exc) or "Failed to connect wallet")
        if not accounts:
            return self._fail("No accounts found")

        self.account = accounts[0]
        self.status = self.CONNECTED
        logger.info(f"Wallet connected: {self.account}")
        self.notifier.success("Wallet connected successfully!")
        return WalletResult(success=True, account=self.account)

    def restore(self) -> bool:
        """Pick up an existing authorisation without prompting the user."""
        if not self.is_available:
            return False
        try:
            accounts = self.provider.request("eth_accounts")
        except Exception as exc:
            logger.warning(f"Connection check error: {exc}")
            return False
        if not accounts:
            return False
        self.account = accounts[0]
        self.status = self.CONNECTED
        return True

    def disconnect(self) -> None:
        self.account = None
        self.status = self.DISCONNECTED
        self.notifier.success("Wallet disconnected")

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise WalletError("Wallet not connected")

    def sign_message(self, message: str) -> str:
        self._require_connection()
        return self.provider.request(
            "personal_sign", ["0x" + message.encode().hex(), self.account]
        )

    def get_balance(self) -> str:
        if not self.is_connected:
            return "0"
        try:
            wei = self.provider.request("eth_getBalance", [self.account, "latest"])
            return format_ether(int(wei, 16))
        except Exception as exc:
            logger.warning(f"Balance fetch error: {exc}")
            return "0"

    def send_transaction(self, to_address: str, value: str = "0", data: str = "0x") -> str:
        self._require_connection()
        if not is_address(to_address):
            raise WalletError("Invalid recipient address")
        tx = {
            "from": self.account,
            "to": to_address,
            "value": hex(parse_ether(value)),
            "data": data,
        }
        tx_hash = self.provider.request("eth_sendTransaction", [tx])
        self.notifier.success(f"Transaction sent! Hash: {tx_hash}")
        return tx_hash

    def handle_accounts_changed(self, accounts: list[str]) -> None:
        if not accounts:
            self.disconnect()
        elif accounts[0] != self.account:
            self.account = accounts[0]
            self.notifier.info("Account changed")

    def handle_chain_changed(self, chain_id: str) -> None:
        self.notifier.info(f"Network changed to chain ID: {chain_id}")
