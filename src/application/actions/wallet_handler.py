"""Wallet handler: answers questions about the caller's wallet."""

import logging
from typing import TYPE_CHECKING, Any

from application.actions.base import ActionContext, ActionHandler, user_fields
from domain.models import ActionResult

if TYPE_CHECKING:
    from infrastructure.adapters.wallet_client import WalletClient

logger = logging.getLogger(__name__)


class GetWalletInfoHandler(ActionHandler):
    """Looks up balances when the request carries a ``wallet`` property.

    Without a wallet the RIM is still produced, with no balances.
    """

    name = "getWalletInfo"

    def __init__(self, persona: str, wallet: "WalletClient") -> None:
        super().__init__(persona)
        self._wallet = wallet

    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        address = context.properties.get("wallet")
        balances: list[dict[str, Any]] = []
        if address:
            balances = await self._wallet.get_all_balances(address)
        else:
            logger.debug("No wallet in request properties; returning empty balances")

        return ActionResult(
            rim_type="wallet",
            response_system_prompt=self._prompt('Generate an answer in the line of "Here are your wallet balances".'),
            parameters={**user_fields(args), "wallet": address, "balances": balances},
        )
