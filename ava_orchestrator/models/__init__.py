"""
Models module - Data structures and type definitions
"""

from .enums import TaskStatus, ResultStatus, AgentType, ObserverState, LicenseScope, RouteKind
from .task import Task, can_transition, ALLOWED_TRANSITIONS
from .transaction import TransactionStep, TransactionPlan, TransactionRecord, transaction_key
from .licensing import IPLicenseTerms, IPMetadata, License, result_license_terms
from .messages import (
    Channel,
    CHANNEL_REGISTRY,
    TaskDispatchPayload,
    AgentResultPayload,
    TaskUpdatePayload,
    AgentMessagePayload,
    AgentErrorPayload,
    AgentActionPayload,
    ToolOutcome,
    dispatch_channel,
    reply_channel,
    payload_type_for,
)

__all__ = [
    'TaskStatus',
    'ResultStatus',
    'AgentType',
    'ObserverState',
    'LicenseScope',
    'RouteKind',
    'Task',
    'can_transition',
    'ALLOWED_TRANSITIONS',
    'TransactionStep',
    'TransactionPlan',
    'TransactionRecord',
    'transaction_key',
    'IPLicenseTerms',
    'IPMetadata',
    'License',
    'result_license_terms',
    'Channel',
    'CHANNEL_REGISTRY',
    'TaskDispatchPayload',
    'AgentResultPayload',
    'TaskUpdatePayload',
    'AgentMessagePayload',
    'AgentErrorPayload',
    'AgentActionPayload',
    'ToolOutcome',
    'dispatch_channel',
    'reply_channel',
    'payload_type_for',
]
