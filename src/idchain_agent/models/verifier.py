"""Verifier models."""

from dataclasses import dataclass, field
from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, Field


class VerifierIdentifier(BaseModel):
    """Identifiers referenced by one credential of a proof."""

    schema_id: str = Field(validation_alias=AliasChoices("schema_id", "schemaId"))
    cred_def_id: str = Field(
        validation_alias=AliasChoices("cred_def_id", "credDefId")
    )
    rev_reg_id: str | None = Field(
        None, validation_alias=AliasChoices("rev_reg_id", "revRegId")
    )
    timestamp: int | None = None


@dataclass
class VerifierEntities:
    """Ledger entities needed to verify a proof, keyed by id.

    Revocation registry states are keyed by revocation registry definition id
    and then by the timestamp of the state.
    """

    schemas: Dict[str, Any] = field(default_factory=dict)
    cred_defs: Dict[str, Any] = field(default_factory=dict)
    rev_reg_defs: Dict[str, Any] = field(default_factory=dict)
    rev_regs: Dict[str, Dict[int, Any]] = field(default_factory=dict)

    def add_rev_reg(self, rev_reg_def_id: str, timestamp: int, rev_reg: Any):
        """Record a revocation registry state at a timestamp."""
        self.rev_regs.setdefault(rev_reg_def_id, {})[timestamp] = rev_reg
