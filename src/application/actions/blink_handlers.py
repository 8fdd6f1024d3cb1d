"""Blink handlers: actions answered with a pre-filled Solana blink URL."""

import json
from abc import abstractmethod
from typing import Any

from application.actions.base import ActionContext, ActionHandler, user_fields
from domain.models import ActionResult

BLINK_RIM_TYPE = "blink"


class BlinkActionHandler(ActionHandler):
    """Builds a ``blink`` RIM from a URL template and the tool arguments.

    Subclasses name the template path and map tool arguments onto the
    template's parameters.
    """

    path_template: str = ""

    def __init__(self, persona: str, blink_base_url: str) -> None:
        super().__init__(persona)
        self._blink_base_url = blink_base_url.rstrip("/")

    @abstractmethod
    def blink_parameters(self, args: dict[str, Any]) -> dict[str, Any]:
        """Map the user-facing tool arguments onto the template parameters."""

    async def execute(self, args: dict[str, Any], context: ActionContext) -> ActionResult:
        fields = user_fields(args)
        return ActionResult(
            rim_type=BLINK_RIM_TYPE,
            response_system_prompt=self._prompt(
                f"Generate an answer explaining that the user should fill these fields: {json.dumps(fields, indent=2)}. "
                "Do not mention the properties, just the fields."
            ),
            parameters={
                "blinkUrl": f"{self._blink_base_url}/{self.path_template}",
                "blinkParameters": self.blink_parameters(fields),
            },
        )


class AddMemoHandler(BlinkActionHandler):
    name = "addMemo"
    path_template = "memo?message={message}"

    def blink_parameters(self, args: dict[str, Any]) -> dict[str, Any]:
        return {"message": args.get("message")}


class TransferSolHandler(BlinkActionHandler):
    name = "transferSol"
    path_template = "transfer-sol?to={to}&amount={amount}"

    def blink_parameters(self, args: dict[str, Any]) -> dict[str, Any]:
        return {"to": args.get("to"), "amount": args.get("amount")}


class SwapHandler(BlinkActionHandler):
    name = "swap"
    path_template = "swap?inputMint={inputMint}&outputMint={outputMint}&amount={amount}"

    def blink_parameters(self, args: dict[str, Any]) -> dict[str, Any]:
        return {"inputMint": args.get("from"), "outputMint": args.get("to"), "amount": args.get("amount")}
