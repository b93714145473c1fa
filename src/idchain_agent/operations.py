"""Ledger operation descriptors.

Each descriptor knows how to build its ledger request and how that request is
submitted. Read operations also know how to parse the reply into an entity.
"""

import json
from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

from indy_vdr import Request

from idchain_agent.error import BadLedgerRequestError
from idchain_agent.sdk import LedgerSdk
from idchain_agent.signer import Signer

LEDGER_TYPES = ("POOL", "DOMAIN", "CONFIG")
NO_ROLE = "NONE"

Parsed = TypeVar("Parsed")


class LedgerOperation:
    """Base ledger operation; submitted unsigned."""

    async def build(self, sdk: LedgerSdk) -> Request:
        """Build the ledger request."""
        raise NotImplementedError()

    async def submit(self, sdk: LedgerSdk, handle: Any, request: Request) -> dict:
        """Submit the built request through the pool handle."""
        return await sdk.submit_request(handle, request)


class ReadOperation(LedgerOperation, Generic[Parsed]):
    """Ledger query whose reply is parsed into an entity."""

    async def parse(self, sdk: LedgerSdk, response: dict) -> Parsed:
        """Parse the ledger reply."""
        raise NotImplementedError()


@dataclass
class SignedOperation(LedgerOperation):
    """Operation signed by the submitter DID before submission."""

    signer: Signer
    submitter_did: str

    async def submit(self, sdk: LedgerSdk, handle: Any, request: Request) -> dict:
        return await sdk.sign_and_submit_request(
            handle, self.signer, self.submitter_did, request
        )


# --- Reads


@dataclass
class GetNym(ReadOperation[dict]):
    """Get the NYM record of a DID; the reply is returned as is."""

    submitter_did: str | None
    target_did: str

    async def build(self, sdk):
        return await sdk.build_get_nym_request(self.submitter_did, self.target_did)

    async def parse(self, sdk, response):
        return response


@dataclass
class GetSchema(ReadOperation[tuple[str, dict]]):
    """Get a schema by id."""

    submitter_did: str | None
    schema_id: str

    async def build(self, sdk):
        return await sdk.build_get_schema_request(self.submitter_did, self.schema_id)

    async def parse(self, sdk, response):
        return await sdk.parse_get_schema_response(response)


@dataclass
class GetCredDef(ReadOperation[tuple[str, dict]]):
    """Get a credential definition by id."""

    submitter_did: str | None
    cred_def_id: str

    async def build(self, sdk):
        return await sdk.build_get_cred_def_request(
            self.submitter_did, self.cred_def_id
        )

    async def parse(self, sdk, response):
        return await sdk.parse_get_cred_def_response(response)


@dataclass
class GetRevocRegDef(ReadOperation[tuple[str, dict]]):
    """Get a revocation registry definition by id."""

    submitter_did: str | None
    revoc_reg_def_id: str

    async def build(self, sdk):
        return await sdk.build_get_revoc_reg_def_request(
            self.submitter_did, self.revoc_reg_def_id
        )

    async def parse(self, sdk, response):
        return await sdk.parse_get_revoc_reg_def_response(response)


@dataclass
class GetRevocReg(ReadOperation[tuple[str, dict, int]]):
    """Get the state of a revocation registry at or before a point in time."""

    submitter_did: str | None
    revoc_reg_def_id: str
    timestamp: int

    async def build(self, sdk):
        return await sdk.build_get_revoc_reg_request(
            self.submitter_did, self.revoc_reg_def_id, self.timestamp
        )

    async def parse(self, sdk, response):
        return await sdk.parse_get_revoc_reg_response(response)


@dataclass
class GetRevocRegDelta(ReadOperation[tuple[str, dict, int]]):
    """Get the changes to a revocation registry between two points in time."""

    submitter_did: str | None
    revoc_reg_def_id: str
    from_time: int | None
    to_time: int

    async def build(self, sdk):
        return await sdk.build_get_revoc_reg_delta_request(
            self.submitter_did, self.revoc_reg_def_id, self.from_time, self.to_time
        )

    async def parse(self, sdk, response):
        return await sdk.parse_get_revoc_reg_delta_response(response)


# --- Writes


@dataclass
class Nym(SignedOperation):
    """Register a DID and its verkey."""

    target_did: str
    verkey: str | None = None
    alias: str | None = None
    role: str | None = None

    @property
    def normalized_role(self) -> str | None:
        """Role to put in the request; NONE means no role."""
        if not self.role or self.role == NO_ROLE:
            return None
        return self.role

    async def build(self, sdk):
        return await sdk.build_nym_request(
            self.submitter_did,
            self.target_did,
            self.verkey,
            self.alias,
            self.normalized_role,
        )


@dataclass
class Attrib(SignedOperation):
    """Attest an attribute of a DID as a hash, raw JSON or encrypted value."""

    target_did: str
    xhash: str | None = None
    raw: str | Mapping[str, Any] | None = None
    enc: str | None = None

    async def build(self, sdk):
        raw = self.raw
        if raw is not None and not isinstance(raw, str):
            raw = json.dumps(raw)
        return await sdk.build_attrib_request(
            self.submitter_did, self.target_did, self.xhash, raw, self.enc
        )


@dataclass
class PublishSchema(SignedOperation):
    """Publish a schema."""

    data: Mapping[str, Any]

    async def build(self, sdk):
        return await sdk.build_schema_request(self.submitter_did, self.data)


@dataclass
class PublishCredDef(SignedOperation):
    """Publish a credential definition."""

    data: Mapping[str, Any]

    async def build(self, sdk):
        return await sdk.build_cred_def_request(self.submitter_did, self.data)


@dataclass
class PublishRevocRegDef(SignedOperation):
    """Publish a revocation registry definition."""

    data: Mapping[str, Any]

    async def build(self, sdk):
        return await sdk.build_revoc_reg_def_request(self.submitter_did, self.data)


@dataclass
class PublishRevocRegEntry(SignedOperation):
    """Publish a revocation registry entry (accumulator update)."""

    revoc_reg_def_id: str
    rev_def_type: str
    value: Mapping[str, Any]

    async def build(self, sdk):
        return await sdk.build_revoc_reg_entry_request(
            self.submitter_did, self.revoc_reg_def_id, self.rev_def_type, self.value
        )


@dataclass
class GetTxn(SignedOperation):
    """Get a single ledger transaction by sequence number."""

    ledger_type: str
    seq_no: int

    async def build(self, sdk):
        ledger_type = self.ledger_type.upper()
        if ledger_type not in LEDGER_TYPES:
            raise BadLedgerRequestError(f"Unknown ledger type: {self.ledger_type}")
        return await sdk.build_get_txn_request(
            self.submitter_did, ledger_type, self.seq_no
        )
