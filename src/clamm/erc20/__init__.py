from .erc20 import Erc20Token

__all__ = ("Erc20Token",)
