"""
Gateway data models.

Transient values created and discarded within a single gateway call.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from stellar_sdk import xdr

from ecostellar.config.constants import (
    DEFAULT_CARBON_OFFSET_KG,
    DEFAULT_PARTNER_ORG,
    DEFAULT_TREE_LOCATION,
    DEFAULT_TREE_SPECIES,
)


class LifecycleState(StrEnum):
    """States of a state-changing contract invocation."""

    BUILDING = "BUILDING"
    SIMULATING = "SIMULATING"
    ASSEMBLING = "ASSEMBLING"
    SIGNING = "SIGNING"
    SUBMITTING = "SUBMITTING"
    POLLING = "POLLING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"


# RPC transaction statuses that mean "keep polling"
PENDING_STATUSES = frozenset({"PENDING", "NOT_FOUND"})


def status_name(status: Any) -> str:
    """Normalize SDK status enums and raw strings to an upper-case name."""
    value = getattr(status, "value", status)
    return str(value).upper()


def native_to_plain(value: Any) -> Any:
    """
    Convert decoded SCVal natives into JSON-friendly values.

    Addresses become strkeys, bytes become hex, containers are walked.
    """
    if isinstance(value, dict):
        return {str(native_to_plain(k)): native_to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [native_to_plain(v) for v in value]
    if isinstance(value, bytes):
        return value.hex()
    address = getattr(value, "address", None)
    if isinstance(address, str):
        return address
    return value


@dataclass(slots=True)
class SimulationResult:
    """Outcome of a dry-run simulation."""

    success: bool
    result: xdr.SCVal | None = None
    error: str | None = None
    min_resource_fee: int | None = None
    latest_ledger: int | None = None


@dataclass(slots=True)
class TransactionOutcome:
    """Final state of a submitted transaction."""

    hash: str
    status: LifecycleState
    method: str
    ledger: int | None = None
    return_value: xdr.SCVal | None = None

    def to_result(self) -> dict[str, Any]:
        return {
            "success": self.status == LifecycleState.SUCCESS,
            "hash": self.hash,
            "status": self.status.value,
            "ledger": self.ledger,
            "return_value": self.return_value,
            "method": self.method,
        }


@dataclass(frozen=True, slots=True)
class TreeMetadata:
    """
    Tree certificate metadata.

    Coordinates are degrees multiplied by 1,000,000.
    """

    species: str = DEFAULT_TREE_SPECIES
    location: str = DEFAULT_TREE_LOCATION
    latitude: int = 0
    longitude: int = 0
    plant_date: int = field(default_factory=lambda: int(time.time()))
    carbon_offset: int = DEFAULT_CARBON_OFFSET_KG
    partner_org: str = DEFAULT_PARTNER_ORG

    # camelCase keys accepted from JSON request bodies
    _ALIASES = {
        "plantDate": "plant_date",
        "carbonOffset": "carbon_offset",
        "partnerOrg": "partner_org",
    }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "TreeMetadata":
        """
        Build metadata from a loose mapping, filling defaults.

        Missing, None or empty values fall back to the defaults.
        """
        values: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = cls._ALIASES.get(key, key)
            if name in cls.__dataclass_fields__ and value not in (None, ""):
                values[name] = value

        for name in ("latitude", "longitude", "plant_date", "carbon_offset"):
            if name in values:
                value = values[name]
                # 40.77 is degrees, not micro-degrees; never truncate it
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(f"{name} must be an integer, got {value}")
                values[name] = int(value)
        # Zero plant date / offset means "not provided"
        if not values.get("plant_date"):
            values.pop("plant_date", None)
        if not values.get("carbon_offset"):
            values.pop("carbon_offset", None)

        return cls(**values)
