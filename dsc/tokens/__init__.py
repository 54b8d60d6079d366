"""In-process token implementations used as engine collaborators."""
from .erc20 import ERC20Token
from .stablecoin import DecentralizedStableCoin, MinterCapability

__all__ = ["DecentralizedStableCoin", "ERC20Token", "MinterCapability"]
