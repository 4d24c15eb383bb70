from eth_typing import ChecksumAddress


class AbstractErc20Token:
    """
    The token capability consumed by a liquidity pool: a balance query and a transfer.
    """

    address: ChecksumAddress
    symbol: str
    decimals: int

    def balance_of(self, address: str) -> int:
        raise NotImplementedError

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        match other:
            case AbstractErc20Token():
                return self.address == other.address
            case str():
                return self.address.lower() == other.lower()
            case _:
                return NotImplemented

    def __lt__(self, other: object) -> bool:
        match other:
            case AbstractErc20Token():
                return self.address.lower() < other.address.lower()
            case str():
                return self.address.lower() < other.lower()
            case _:
                return NotImplemented

    def __gt__(self, other: object) -> bool:
        match other:
            case AbstractErc20Token():
                return self.address.lower() > other.address.lower()
            case str():
                return self.address.lower() > other.lower()
            case _:
                return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address)

    def __str__(self) -> str:
        return self.symbol
