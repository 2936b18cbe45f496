"""
Transaction models - Plans produced by the transaction planner and persisted by the executor
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


TRANSACTION_KEY_PREFIX = "transaction:"


def transaction_key(task_id: str) -> str:
    return f"{TRANSACTION_KEY_PREFIX}{task_id}"


@dataclass
class TransactionStep:
    """One on-chain call of a plan. ``value`` is in wei, kept as a decimal string."""
    to: str
    value: str = "0"
    data: str = "0x"

    def to_dict(self) -> Dict[str, Any]:
        return {"to": self.to, "value": self.value, "data": self.data}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionStep":
        return cls(
            to=data["to"],
            value=str(data.get("value") or "0"),
            data=data.get("data") or "0x",
        )


@dataclass
class TransactionPlan:
    """Planner output for one natural-language instruction, amounts already human readable."""
    steps: List[TransactionStep]
    from_token: Optional[str] = None
    to_token: Optional[str] = None
    from_amount: Optional[str] = None
    to_amount: Optional[str] = None
    from_amount_usd: Optional[str] = None
    to_amount_usd: Optional[str] = None


@dataclass
class TransactionRecord:
    """A persisted plan waiting to be simulated or executed."""
    task_id: str
    task: str
    steps: List[TransactionStep] = field(default_factory=list)
    from_token: Optional[str] = None
    to_token: Optional[str] = None
    from_amount: Optional[str] = None
    to_amount: Optional[str] = None
    from_amount_usd: Optional[str] = None
    to_amount_usd: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def key(self) -> str:
        return transaction_key(self.task_id)

    def apply_plan(self, plan: TransactionPlan) -> None:
        """Overwrite the plan fields, keeping ``created_at``."""
        self.steps = list(plan.steps)
        self.from_token = plan.from_token
        self.to_token = plan.to_token
        self.from_amount = plan.from_amount
        self.to_amount = plan.to_amount
        self.from_amount_usd = plan.from_amount_usd
        self.to_amount_usd = plan.to_amount_usd
        self.updated_at = datetime.now().isoformat()

    def describe(self) -> str:
        """Human-readable summary used by the simulation stage."""
        lines = [f'[taskId: {self.task_id}] "{self.task}"']
        if self.from_token or self.to_token:
            lines.append(f"The transaction is from {self.from_token} to {self.to_token}.")
        if self.from_amount is not None:
            amount = f"The amount is {self.from_amount} {self.from_token or ''}".rstrip()
            if self.from_amount_usd:
                amount += f" (${self.from_amount_usd})"
            if self.to_amount is not None:
                amount += f" for at least {self.to_amount} {self.to_token or ''}".rstrip()
            lines.append(amount + ".")
        lines.append(f"It has {len(self.steps)} on-chain step(s).")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "task": self.task,
            "steps": [step.to_dict() for step in self.steps],
            "from_token": self.from_token,
            "to_token": self.to_token,
            "from_amount": self.from_amount,
            "to_amount": self.to_amount,
            "from_amount_usd": self.from_amount_usd,
            "to_amount_usd": self.to_amount_usd,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        return cls(
            task_id=data["task_id"],
            task=data["task"],
            steps=[TransactionStep.from_dict(s) for s in data.get("steps", [])],
            from_token=data.get("from_token"),
            to_token=data.get("to_token"),
            from_amount=data.get("from_amount"),
            to_amount=data.get("to_amount"),
            from_amount_usd=data.get("from_amount_usd"),
            to_amount_usd=data.get("to_amount_usd"),
            created_at=data.get("created_at") or datetime.now().isoformat(),
            updated_at=data.get("updated_at") or datetime.now().isoformat(),
        )
