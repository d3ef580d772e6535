from .client import SolanaClient
from .keys import parse_pubkey

__all__ = ["SolanaClient", "parse_pubkey"]
