"""
Observer toolkit - Read-only market, wallet and social tools

Every tool wraps one MarketDataProvider call. None of them touches the
chain or writes anything, so the observer can run them independently and
keep going when some of them fail.
"""

from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ava_orchestrator.core.tool import NoArguments, Tool, ToolExecutionOptions, Toolkit
from ava_orchestrator.services.interfaces import MarketDataProvider
from ava_orchestrator.utils.exceptions import ToolExecutionError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)

MAX_TOP_AGENTS_PAGE_SIZE = 25
TWEET_LOOKBACK_DAYS = 7


class TopAgentsArgs(BaseModel):
    interval: str = Field("_7Days", description="Ranking window, e.g. _3Days or _7Days")
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=MAX_TOP_AGENTS_PAGE_SIZE)


class SearchTweetsArgs(BaseModel):
    query: str = Field(..., min_length=1, description="Search query, usually the task text")
    from_date: str = Field(..., description="Start date, YYYY-MM-DD")
    to_date: str = Field(..., description="End date, YYYY-MM-DD")


def build_observer_toolkit(market_data: MarketDataProvider, address: Optional[str] = None) -> Toolkit:
    """
    Build the observer's tools over ``market_data``.

    Args:
        market_data: Provider for market, wallet, ranking and social data
        address: Wallet the observer watches; getWalletBalances fails without one
    """

    async def get_market_data(args: NoArguments, options: ToolExecutionOptions) -> Any:
        logger.info("[getMarketData] fetching market data...")
        return await market_data.get_market_data()

    async def get_wallet_balances(args: NoArguments, options: ToolExecutionOptions) -> Any:
        if not address:
            raise ToolExecutionError("getWalletBalances", "no wallet address configured for the observer")
        logger.info(f"[getWalletBalances] fetching token balances for {address}...")
        return await market_data.get_wallet_balances(address)

    async def get_top_agents(args: TopAgentsArgs, options: ToolExecutionOptions) -> Any:
        logger.info(f"[getTopAgents] interval={args.interval} page={args.page} size={args.page_size}")
        return await market_data.get_top_agents(args.interval, args.page, args.page_size)

    async def search_tweets(args: SearchTweetsArgs, options: ToolExecutionOptions) -> Any:
        logger.info(f"[searchTweets] '{args.query}' from {args.from_date} to {args.to_date}")
        return await market_data.search_tweets(args.query, args.from_date, args.to_date)

    return Toolkit([
        Tool("getMarketData", "Returns current market data and yield opportunities.", get_market_data),
        Tool("getWalletBalances", "Returns the token balances and open positions of the observed wallet.",
             get_wallet_balances),
        Tool("getTopAgents", "Returns AI agents ranked by mindshare.", get_top_agents, TopAgentsArgs),
        Tool("searchTweets", "Searches recent tweets for a query.", search_tweets, SearchTweetsArgs),
    ])


def default_tool_calls(task: str, today: Optional[date] = None) -> List[Tuple[str, Dict[str, Any]]]:
    """The (tool name, arguments) pairs the observer runs for ``task``."""
    today = today or date.today()
    return [
        ("getMarketData", {}),
        ("getWalletBalances", {}),
        ("getTopAgents", {"interval": "_7Days", "page": 1, "page_size": 10}),
        ("searchTweets", {
            "query": task,
            "from_date": (today - timedelta(days=TWEET_LOOKBACK_DAYS)).isoformat(),
            "to_date": today.isoformat(),
        }),
    ]
