"""GraphQL indexer client — vault snapshots and account figures."""
from __future__ import annotations

import logging
from typing import Any

from ..config import IndexerConfig
from ..errors import CollaboratorError
from ..models import AccountData, Vault
from . import parsing
from .http import FallbackPoster

logger = logging.getLogger(__name__)

VAULTS_QUERY = """
query Vaults($depositor: String!) {
  vaults(where: { depositor: $depositor }, orderBy: "createdAt") {
    items { id amount status isInUse depositor }
  }
}
"""

ACCOUNT_QUERY = """
query UserAccount($proxy: String!) {
  userAccount(id: $proxy) {
    totalCollateralValue
    totalDebtValue
    healthFactor
    liquidationThresholdBps
  }
}
"""


class IndexerClient:
    """Reads the eventually-consistent indexed ledger."""

    def __init__(self, config: IndexerConfig) -> None:
        self._poster = FallbackPoster(config.endpoints, config.timeout, name="indexer endpoint")

    async def _query(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        body = await self._poster.post({"query": query, "variables": variables})
        data = body.get("data")
        if not isinstance(data, dict):
            raise CollaboratorError("Indexer response has no data")
        return data

    async def fetch_vaults(self, depositor: str) -> list[Vault]:
        data = await self._query(VAULTS_QUERY, {"depositor": depositor.lower()})
        vaults = parsing.parse_vaults(data)
        logger.info("Indexer returned %d vault(s) for %s", len(vaults), depositor)
        return vaults

    async def fetch_account_data(self, proxy_address: str) -> AccountData:
        data = await self._query(ACCOUNT_QUERY, {"proxy": proxy_address.lower()})
        return parsing.parse_account_data(data)
