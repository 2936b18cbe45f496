"""
Transaction planner - Turns a natural-language instruction into on-chain steps

BrianTransactionPlanner posts the instruction to the Brian agent API and
converts the first returned action into a TransactionPlan with
human-readable token amounts.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

import httpx

from ava_orchestrator.config.agent_config import ChainConfig
from ava_orchestrator.models.transaction import TransactionPlan, TransactionStep
from ava_orchestrator.utils.exceptions import ConfigurationError, TransactionPlanningError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


def format_units(value: Union[int, str], decimals: int) -> str:
    """
    Render an integer token amount in base units as a decimal string.

    >>> format_units("1500000", 6)
    '1.5'
    >>> format_units(10**18, 18)
    '1'
    """
    try:
        amount = Decimal(int(value)).scaleb(-int(decimals))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Cannot format amount {value!r} with {decimals!r} decimals") from e
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


class BrianTransactionPlanner:
    """
    TransactionPlanner backed by the Brian agent API.

    Usage:
        planner = BrianTransactionPlanner.from_config(ChainConfig.from_env())
        plan = await planner.plan("swap 10 AVAX to USDC", 43114, "0xabc...")
    """

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.brianknows.org/api/v0/agent/transaction",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        if not api_key:
            raise ConfigurationError("BRIAN_API_KEY", "API key for the transaction planner is not set")
        self.url = url
        self._headers = {"Content-Type": "application/json", "x-brian-api-key": api_key}
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: ChainConfig) -> "BrianTransactionPlanner":
        return cls(config.planner_api_key, url=config.planner_url, timeout=config.request_timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def plan(self, prompt: str, chain_id: int, address: str) -> TransactionPlan:
        """
        Plan ``prompt`` for ``address`` on ``chain_id``.

        Raises:
            TransactionPlanningError: If the API fails or returns no usable action
        """
        logger.info(f"[PLANNER] Fetching transaction data for task: \"{prompt}\"")
        try:
            resp = await self._client.post(
                self.url,
                json={"prompt": prompt, "chainId": str(chain_id), "address": address},
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise TransactionPlanningError(prompt, f"request failed: {e}", original_error=e) from e

        if resp.status_code != 200:
            raise TransactionPlanningError(prompt, f"planner returned {resp.status_code}: {resp.text[:300]}")

        try:
            body = resp.json()
        except ValueError as e:
            raise TransactionPlanningError(prompt, "planner returned invalid JSON", original_error=e) from e

        if not isinstance(body, dict):
            raise TransactionPlanningError(prompt, "planner returned an unexpected body")
        result = body.get("result")
        if not result:
            raise TransactionPlanningError(prompt, str(body.get("error") or "no result"))

        data = result[0].get("data") or {}
        if data.get("description"):
            logger.info(f"[PLANNER] Planner says: {data['description']}")

        try:
            return self._to_plan(data)
        except (KeyError, TypeError, ValueError) as e:
            raise TransactionPlanningError(prompt, f"unexpected plan format: {e}", original_error=e) from e

    @staticmethod
    def _to_plan(data: Dict[str, Any]) -> TransactionPlan:
        steps = [TransactionStep.from_dict(step) for step in data.get("steps") or []]
        if not steps:
            raise ValueError("plan has no steps")

        from_token = data.get("fromToken") or {}
        to_token = data.get("toToken") or {}

        from_amount = None
        if data.get("fromAmount") is not None and from_token.get("decimals") is not None:
            from_amount = format_units(data["fromAmount"], from_token["decimals"])
        to_amount = None
        if data.get("toAmountMin") is not None and to_token.get("decimals") is not None:
            to_amount = format_units(data["toAmountMin"], to_token["decimals"])

        return TransactionPlan(
            steps=steps,
            from_token=from_token.get("symbol"),
            to_token=to_token.get("symbol"),
            from_amount=from_amount,
            to_amount=to_amount,
            from_amount_usd=_optional_str(data.get("fromAmountUSD")),
            to_amount_usd=_optional_str(data.get("toAmountUSD")),
        )


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
