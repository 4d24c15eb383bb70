from eth_typing import ChecksumAddress

from clamm.checksum_cache import get_checksum_address
from clamm.exceptions import ClammValueError
from clamm.logging import logger
from clamm.types.abstract import AbstractErc20Token


class Erc20Token(AbstractErc20Token):
    """
    An in-memory ERC-20 token ledger.

    Balances are keyed by checksummed address. A transfer that cannot be covered by the sender's
    balance is rejected by returning False, mirroring tokens that signal failure through the
    return value instead of reverting.
    """

    def __init__(
        self,
        address: str,
        *,
        symbol: str,
        name: str | None = None,
        decimals: int = 18,
        balances: dict[str, int] | None = None,
        silent: bool = False,
    ) -> None:
        if decimals < 0:
            raise ClammValueError(message=f"Invalid decimals {decimals}")

        self.address: ChecksumAddress = get_checksum_address(address)
        self.symbol = symbol
        self.name = name if name is not None else symbol
        self.decimals = decimals
        self._balances: dict[ChecksumAddress, int] = {}

        for holder, amount in (balances or {}).items():
            self.mint_to(holder, amount)

        if not silent:  # pragma: no branch
            logger.info(f"{self.name} ({self.symbol}) @ {self.address}, {self.decimals} decimals")

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address}, symbol='{self.symbol}', decimals={self.decimals})"  # noqa: E501

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def balance_of(self, address: str) -> int:
        return self._balances.get(get_checksum_address(address), 0)

    def mint_to(self, address: str, amount: int) -> None:
        """
        Credit new tokens to an address.
        """

        if amount < 0:
            raise ClammValueError(message=f"Cannot mint a negative amount {amount}")

        holder = get_checksum_address(address)
        self._balances[holder] = self._balances.get(holder, 0) + amount

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Move `amount` tokens from `sender` to `recipient`. Returns False without changing any
        balance if the amount is negative or exceeds the sender's balance.
        """

        _sender = get_checksum_address(sender)
        _recipient = get_checksum_address(recipient)

        sender_balance = self._balances.get(_sender, 0)
        if amount < 0 or amount > sender_balance:
            logger.debug(
                f"{self.symbol} transfer of {amount} from {_sender} rejected (balance {sender_balance})"  # noqa: E501
            )
            return False

        self._balances[_sender] = sender_balance - amount
        self._balances[_recipient] = self._balances.get(_recipient, 0) + amount
        return True
