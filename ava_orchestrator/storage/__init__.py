"""
Storage module - StorageClient and TaskRepository adapters
"""

from typing import Tuple

from ava_orchestrator.config.agent_config import StorageConfig
from .memory import InMemoryStorage, InMemoryTaskRepository
from .redis_store import RedisStorage, RedisTaskRepository, create_redis_client


def create_storage(config: StorageConfig) -> Tuple[object, object]:
    """
    Build the (StorageClient, TaskRepository) pair selected by ``config.backend``.

    Both Redis adapters share one client.
    """
    if config.backend == "redis":
        client = create_redis_client(config)
        return (
            RedisStorage(client, namespace=config.namespace),
            RedisTaskRepository(client, namespace=config.namespace),
        )
    return InMemoryStorage(), InMemoryTaskRepository()


__all__ = [
    'InMemoryStorage',
    'InMemoryTaskRepository',
    'RedisStorage',
    'RedisTaskRepository',
    'create_redis_client',
    'create_storage',
]
