"""
In-memory storage adapters for tests and single-process runs
"""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

from ava_orchestrator.models.task import Task
from ava_orchestrator.utils.exceptions import StorageError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)

COT_PREFIX = "cot:"


class InMemoryStorage:
    """
    Dict-backed StorageClient.

    Values are deep-copied on the way in and out, so callers can't mutate
    what is stored.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}

    async def store(self, key: str, data: Any, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._entries[key] = {
            "data": copy.deepcopy(data),
            "metadata": copy.deepcopy(metadata or {}),
            "timestamp": datetime.now().isoformat(),
        }
        logger.debug(f"[STORAGE] Stored {key}")

    async def retrieve(self, key: str) -> Dict[str, Any]:
        if key not in self._entries:
            raise StorageError(key, "retrieve", "no data stored under this key")
        return copy.deepcopy(self._entries[key])

    async def delete(self, key: str) -> bool:
        existed = self._entries.pop(key, None) is not None
        if existed:
            logger.debug(f"[STORAGE] Deleted {key}")
        return existed

    async def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self._entries if k.startswith(prefix))

    async def store_cot(self, key: str, thoughts: List[str], metadata: Optional[Dict[str, Any]] = None) -> None:
        self._entries[f"{COT_PREFIX}{key}"] = {
            "thoughts": list(thoughts),
            "metadata": copy.deepcopy(metadata or {}),
            "timestamp": datetime.now().isoformat(),
        }
        logger.debug(f"[STORAGE] Stored chain of thought {key}")

    async def retrieve_cot(self, key: str) -> Dict[str, Any]:
        full_key = f"{COT_PREFIX}{key}"
        if full_key not in self._entries:
            raise StorageError(full_key, "retrieve_cot", "no chain of thought stored under this key")
        return copy.deepcopy(self._entries[full_key])


class InMemoryTaskRepository:
    """Dict-backed TaskRepository. ``get`` returns a copy; call ``save`` to persist changes."""

    def __init__(self):
        self._tasks: Dict[str, Dict[str, Any]] = {}

    async def get(self, task_id: str) -> Optional[Task]:
        data = self._tasks.get(task_id)
        return Task.from_dict(data) if data is not None else None

    async def save(self, task: Task) -> None:
        self._tasks[task.id] = copy.deepcopy(task.to_dict())

    async def list(self) -> List[Task]:
        return [Task.from_dict(data) for data in self._tasks.values()]
