"""
Task router - Content-based routing of task descriptions

The router classifies a natural-language task and returns a tagged
RoutingDecision: forward verbatim to an external agent, execute on-chain,
or observe. Keywords match case-insensitively from the start of a word and
accept any ending, so "bridge" matches "bridging" and "transfer" matches
"transfers", while "long" still does not match "along".
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ava_orchestrator.models.enums import RouteKind
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


class TaskCategory(str, Enum):
    DEFI_EXECUTION = "defi_execution"
    OBSERVATION = "observation"
    ANALYSIS = "analysis"
    UNKNOWN = "unknown"


DEFI_KEYWORDS = [
    'swap', 'bridge', 'transfer', 'send', 'buy', 'sell',
    'deposit', 'withdraw', 'stake', 'unstake', 'provide liquidity',
    'remove liquidity', 'borrow', 'repay', 'leverage', 'long', 'short'
]

OBSERVATION_KEYWORDS = [
    'monitor', 'check', 'analyze', 'observe', 'track',
    'get market data', 'get price', 'get balance', 'fetch',
    'retrieve', 'watch', 'review'
]

ANALYSIS_KEYWORDS = ['analysis', 'report']


@dataclass(frozen=True)
class RoutingDecision:
    """
    Where a task goes.

    Attributes:
        kind: external, executor or observer
        target: Agent name the task is dispatched to
        category: Task category the description was classified as
        keyword: Keyword that decided the route, if any
    """
    kind: RouteKind
    target: str
    category: TaskCategory
    keyword: Optional[str] = None

    @property
    def is_external(self) -> bool:
        return self.kind == RouteKind.EXTERNAL


def _stem(word: str) -> str:
    """``bridge`` -> ``bridg``, so inflections like ``bridging`` match."""
    return word[:-1] if len(word) > 3 and word.endswith("e") else word


def _compile(keywords: List[str]) -> List[Tuple[str, re.Pattern]]:
    patterns = []
    for k in keywords:
        words = [re.escape(_stem(w.lower())) + r"\w*" for w in k.split()]
        patterns.append((k, re.compile(r"\b" + r"\s+".join(words), re.IGNORECASE)))
    return patterns


class TaskRouter:
    """
    Keyword classifier for task descriptions.

    Usage:
        router = TaskRouter(external_agents={"cookie": ["mindshare", "cookie"]})
        decision = router.route("swap 10 AVAX to USDC")
        assert decision.kind == RouteKind.EXECUTOR
    """

    def __init__(
        self,
        external_agents: Optional[Dict[str, List[str]]] = None,
        defi_keywords: Optional[List[str]] = None,
        observation_keywords: Optional[List[str]] = None,
        analysis_keywords: Optional[List[str]] = None
    ):
        self.external_agents = {
            agent: _compile(keywords) for agent, keywords in (external_agents or {}).items()
        }
        self._defi = _compile(defi_keywords or DEFI_KEYWORDS)
        self._observation = _compile(observation_keywords or OBSERVATION_KEYWORDS)
        self._analysis = _compile(analysis_keywords or ANALYSIS_KEYWORDS)

    @staticmethod
    def _match(description: str, patterns: List[Tuple[str, re.Pattern]]) -> Optional[str]:
        for keyword, pattern in patterns:
            if pattern.search(description):
                return keyword
        return None

    def classify(self, description: str) -> Tuple[TaskCategory, Optional[str]]:
        """Return the task category and the keyword that decided it."""
        keyword = self._match(description, self._defi)
        if keyword:
            return TaskCategory.DEFI_EXECUTION, keyword
        keyword = self._match(description, self._observation)
        if keyword:
            return TaskCategory.OBSERVATION, keyword
        keyword = self._match(description, self._analysis)
        if keyword:
            return TaskCategory.ANALYSIS, keyword
        return TaskCategory.UNKNOWN, None

    def route(self, description: str) -> RoutingDecision:
        """
        Decide where ``description`` goes.

        External agents win over internal ones; DeFi actions go to the
        executor; everything else, unknown included, goes to the observer.
        """
        category, keyword = self.classify(description)

        for agent, patterns in self.external_agents.items():
            matched = self._match(description, patterns)
            if matched:
                decision = RoutingDecision(RouteKind.EXTERNAL, agent, category, matched)
                logger.info(f"[ROUTER] '{description}' → external agent {agent} (keyword '{matched}')")
                return decision

        if category == TaskCategory.DEFI_EXECUTION:
            decision = RoutingDecision(RouteKind.EXECUTOR, RouteKind.EXECUTOR.value, category, keyword)
        else:
            decision = RoutingDecision(RouteKind.OBSERVER, RouteKind.OBSERVER.value, category, keyword)

        logger.info(f"[ROUTER] '{description}' → {decision.target} ({category.value})")
        return decision
