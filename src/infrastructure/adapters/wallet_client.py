"""Solana JSON-RPC client used by the getWalletInfo action.

Only read calls are made: the SOL balance of an address and the parsed
SPL token accounts it owns.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000
SOL_MINT = "So11111111111111111111111111111111111111112"


class WalletRpcError(Exception):
    """Raised when the RPC node answers with a JSON-RPC error object."""

    def __init__(self, method: str, error: dict[str, Any]) -> None:
        super().__init__(f"{method} failed: {error.get('message', error)}")
        self.method = method
        self.error = error


class WalletClient:
    """Reads wallet balances from a Solana RPC node."""

    def __init__(self, http_client: httpx.AsyncClient, rpc_url: str, token_program_id: str) -> None:
        self._client = http_client
        self._rpc_url = rpc_url
        self._token_program_id = token_program_id
        self._request_id = 0

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        response = await self._client.post(
            self._rpc_url,
            json={"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params},
        )
        response.raise_for_status()
        payload = response.json()
        if payload.get("error"):
            raise WalletRpcError(method, payload["error"])
        return payload.get("result")

    async def get_sol_balance(self, address: str) -> float:
        result = await self._call("getBalance", [address])
        return (result or {}).get("value", 0) / LAMPORTS_PER_SOL

    async def get_token_balances(self, address: str) -> list[dict[str, Any]]:
        result = await self._call(
            "getTokenAccountsByOwner",
            [address, {"programId": self._token_program_id}, {"encoding": "jsonParsed"}],
        )
        balances = []
        for account in (result or {}).get("value", []):
            info = account["account"]["data"]["parsed"]["info"]
            token_amount = info.get("tokenAmount", {})
            balances.append(
                {
                    "mint": info.get("mint"),
                    "balance": token_amount.get("uiAmount") or 0,
                    "decimals": token_amount.get("decimals", 0),
                }
            )
        return balances

    async def get_all_balances(self, address: str) -> list[dict[str, Any]]:
        """SOL first, then SPL tokens; zero balances are dropped."""
        sol_balance = await self.get_sol_balance(address)
        balances = [{"mint": SOL_MINT, "balance": sol_balance, "symbol": "SOL", "decimals": 9}]
        balances.extend(await self.get_token_balances(address))
        logger.debug(f"👛 Fetched {len(balances)} balances for {address}")
        return [balance for balance in balances if balance["balance"] > 0]
