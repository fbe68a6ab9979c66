"""Protocol interfaces for the collaborators injected into the engine."""
from .pending_store import PendingStore
from .price_oracle import PriceOracle
from .sources import DebtSource, SnapshotSource, TokenSource

__all__ = ["DebtSource", "PendingStore", "PriceOracle", "SnapshotSource", "TokenSource"]
