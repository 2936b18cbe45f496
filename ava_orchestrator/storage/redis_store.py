"""
Redis storage adapters - Durable StorageClient and TaskRepository

Entries are JSON documents under ``<namespace>:<key>``; chains of thought
under ``<namespace>:cot:<key>``; the Task table is one hash,
``<namespace>:tasks``, keyed by task id.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import redis
import redis.asyncio as aioredis

from ava_orchestrator.config.agent_config import StorageConfig
from ava_orchestrator.models.task import Task
from ava_orchestrator.storage.memory import COT_PREFIX
from ava_orchestrator.utils.exceptions import StorageError
from ava_orchestrator.utils.logger import get_logger

logger = get_logger(__name__)


def create_redis_client(config: StorageConfig) -> aioredis.Redis:
    """Create an asyncio Redis client from storage settings."""
    return aioredis.Redis(
        host=config.host,
        port=config.port,
        db=config.db,
        password=config.password,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30
    )


class RedisStorage:
    """
    Redis-backed StorageClient.

    Usage:
        storage = RedisStorage.from_config(StorageConfig(backend="redis", host="cache"))
        await storage.ping()
        await storage.store("observation:T1", {"analysis": "..."}, {"licenseId": "lic-1"})
    """

    def __init__(self, client: aioredis.Redis, namespace: str = "ava"):
        self.client = client
        self.namespace = namespace

    @classmethod
    def from_config(cls, config: StorageConfig) -> "RedisStorage":
        return cls(create_redis_client(config), namespace=config.namespace)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def ping(self) -> bool:
        try:
            await self.client.ping()
        except redis.RedisError as e:
            logger.warning(f"[REDIS] Connection failed: {e}")
            return False
        logger.info(f"[REDIS] Connected (namespace={self.namespace})")
        return True

    async def _write(self, operation: str, key: str, document: Dict[str, Any]) -> None:
        try:
            await self.client.set(self._key(key), json.dumps(document, default=str))
        except redis.RedisError as e:
            raise StorageError(key, operation, str(e), original_error=e) from e
        logger.debug(f"[REDIS] ✓ {operation} {key}")

    async def _read(self, operation: str, key: str) -> Dict[str, Any]:
        try:
            raw = await self.client.get(self._key(key))
        except redis.RedisError as e:
            raise StorageError(key, operation, str(e), original_error=e) from e
        if raw is None:
            raise StorageError(key, operation, "no data stored under this key")
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(key, operation, f"corrupt JSON document: {e}", original_error=e) from e

    async def store(self, key: str, data: Any, metadata: Optional[Dict[str, Any]] = None) -> None:
        await self._write("store", key, {
            "data": data,
            "metadata": metadata or {},
            "timestamp": datetime.now().isoformat(),
        })

    async def retrieve(self, key: str) -> Dict[str, Any]:
        return await self._read("retrieve", key)

    async def delete(self, key: str) -> bool:
        try:
            removed = await self.client.delete(self._key(key))
        except redis.RedisError as e:
            raise StorageError(key, "delete", str(e), original_error=e) from e
        return bool(removed)

    async def keys(self, prefix: str = "") -> List[str]:
        try:
            found = [k async for k in self.client.scan_iter(match=f"{self._key(prefix)}*")]
        except redis.RedisError as e:
            raise StorageError(prefix, "keys", str(e), original_error=e) from e
        strip = len(self.namespace) + 1
        return sorted(k[strip:] for k in found)

    async def store_cot(self, key: str, thoughts: List[str], metadata: Optional[Dict[str, Any]] = None) -> None:
        await self._write("store_cot", f"{COT_PREFIX}{key}", {
            "thoughts": list(thoughts),
            "metadata": metadata or {},
            "timestamp": datetime.now().isoformat(),
        })

    async def retrieve_cot(self, key: str) -> Dict[str, Any]:
        return await self._read("retrieve_cot", f"{COT_PREFIX}{key}")


class RedisTaskRepository:
    """Redis-backed TaskRepository storing every task in one hash."""

    def __init__(self, client: aioredis.Redis, namespace: str = "ava"):
        self.client = client
        self.hash_key = f"{namespace}:tasks"

    @classmethod
    def from_config(cls, config: StorageConfig) -> "RedisTaskRepository":
        return cls(create_redis_client(config), namespace=config.namespace)

    async def get(self, task_id: str) -> Optional[Task]:
        try:
            raw = await self.client.hget(self.hash_key, task_id)
        except redis.RedisError as e:
            raise StorageError(task_id, "get_task", str(e), original_error=e) from e
        return Task.from_dict(json.loads(raw)) if raw else None

    async def save(self, task: Task) -> None:
        try:
            await self.client.hset(self.hash_key, task.id, json.dumps(task.to_dict(), default=str))
        except redis.RedisError as e:
            raise StorageError(task.id, "save_task", str(e), original_error=e) from e

    async def list(self) -> List[Task]:
        try:
            values = await self.client.hvals(self.hash_key)
        except redis.RedisError as e:
            raise StorageError(self.hash_key, "list_tasks", str(e), original_error=e) from e
        return [Task.from_dict(json.loads(v)) for v in values]
