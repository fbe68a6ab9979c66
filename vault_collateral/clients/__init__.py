"""Read-only adapters for the indexer and the chain."""
from .eth_rpc import EthRpcClient
from .indexer import IndexerClient

__all__ = ["EthRpcClient", "IndexerClient"]
