"""
Licensing models - Reuse terms and provenance metadata attached to produced artifacts
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from ava_orchestrator.models.enums import LicenseScope


@dataclass
class IPLicenseTerms:
    """Terms governing reuse of one artifact."""
    name: str
    description: str
    scope: LicenseScope = LicenseScope.COMMERCIAL
    transferability: bool = True
    onchain_enforcement: bool = True
    royalty_rate: Optional[float] = None
    duration: Optional[str] = None
    jurisdiction: Optional[str] = None
    governing_law: Optional[str] = None
    revocation_conditions: Optional[List[str]] = None
    dispute_resolution: Optional[str] = None
    offchain_enforcement: Optional[str] = None
    compliance_requirements: Optional[List[str]] = None
    ip_restrictions: Optional[List[str]] = None
    chain_of_ownership: Optional[List[str]] = None
    rev_share: Optional[Dict[str, float]] = None

    def __post_init__(self):
        self.scope = LicenseScope(self.scope)
        if self.royalty_rate is not None and not 0 <= self.royalty_rate <= 1:
            raise ValueError(f"royalty_rate must be between 0 and 1, got {self.royalty_rate}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["scope"] = self.scope.value
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IPLicenseTerms":
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class IPMetadata:
    """Binds a license to the provenance chain of an artifact. ``issuer_id`` is the producing agent."""
    issuer_id: str
    holder_id: str
    issue_date: str = field(default_factory=lambda: datetime.now().isoformat())
    version: str = "1.0"
    license_id: Optional[str] = None
    expiry_date: Optional[str] = None
    link_to_terms: Optional[str] = None
    previous_license_id: Optional[str] = None
    signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IPMetadata":
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class License:
    """A minted license as returned by the licensing collaborator."""
    license_id: str
    terms: IPLicenseTerms
    metadata: IPMetadata
    revoked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "license_id": self.license_id,
            "terms": self.terms.to_dict(),
            "metadata": self.metadata.to_dict(),
            "revoked": self.revoked,
        }


def result_license_terms(task_id: str, kind: str, royalty_rate: float = 0.05) -> IPLicenseTerms:
    """
    Terms minted for an agent result.

    Args:
        task_id: Task the result belongs to
        kind: "Observation" or "Execution"
    """
    return IPLicenseTerms(
        name=f"Task {kind} Result - {task_id}",
        description=f"License for the {kind.lower()} result of task {task_id}",
        scope=LicenseScope.COMMERCIAL,
        transferability=True,
        onchain_enforcement=True,
        royalty_rate=royalty_rate,
    )
