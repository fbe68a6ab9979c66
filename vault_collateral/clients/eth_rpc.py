"""Ethereum JSON-RPC reads — live debt, allowance and balance."""
from __future__ import annotations

import logging

from ..config import ChainConfig
from ..errors import CollaboratorError
from .http import FallbackPoster
from .parsing import decode_uint, encode_address, encode_uint

logger = logging.getLogger(__name__)

# ERC-20 selectors
ALLOWANCE_SELECTOR = "0xdd62ed3e"  # allowance(address,address)
BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)


class EthRpcClient:
    """Read-only ``eth_call`` client against the latest block.

    Expects ``contracts`` to hold ``debt_token`` (ERC-20 being repaid),
    ``spoke`` and ``total_debt_selector`` (the spoke's
    ``getUserTotalDebt(uint256,address)`` selector).
    """

    def __init__(self, config: ChainConfig) -> None:
        self._poster = FallbackPoster(config.rpc_endpoints, config.rpc_timeout, name="RPC endpoint")
        self._contracts = dict(config.contracts)
        self._request_id = 0

    def _contract(self, name: str) -> str:
        address = self._contracts.get(name)
        if not address:
            raise CollaboratorError(f"Contract '{name}' is not configured")
        return address

    async def eth_call(self, to: str, data: str) -> str:
        self._request_id += 1
        body = await self._poster.post(
            {
                "jsonrpc": "2.0",
                "id": self._request_id,
                "method": "eth_call",
                "params": [{"to": to, "data": data}, "latest"],
            }
        )
        result = body.get("result")
        if not isinstance(result, str):
            raise CollaboratorError(f"eth_call to {to} returned no result")
        return result

    async def get_allowance(self, owner: str, spender: str) -> int:
        data = ALLOWANCE_SELECTOR + encode_address(owner) + encode_address(spender)
        return decode_uint(await self.eth_call(self._contract("debt_token"), data))

    async def get_balance(self, owner: str) -> int:
        data = BALANCE_OF_SELECTOR + encode_address(owner)
        return decode_uint(await self.eth_call(self._contract("debt_token"), data))

    async def get_user_total_debt(self, reserve_id: int, proxy_address: str) -> int:
        selector = self._contract("total_debt_selector")
        data = selector + encode_uint(reserve_id) + encode_address(proxy_address)
        debt = decode_uint(await self.eth_call(self._contract("spoke"), data))
        logger.debug("Live debt for %s in reserve %d: %d", proxy_address, reserve_id, debt)
        return debt
