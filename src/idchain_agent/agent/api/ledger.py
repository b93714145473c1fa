"""Ledger API."""

from typing import Any, Dict, List, Literal, Mapping

from fastapi import APIRouter, HTTPException, Query, Security
from pydantic import BaseModel, Field

from idchain_agent.agent.depends import LedgerDep, StoreDep
from idchain_agent.agent.security import client
from idchain_agent.agent.wallet import get_signer
from idchain_agent.models.verifier import VerifierIdentifier

router = APIRouter(prefix="/ledger", dependencies=[Security(client)])

MAX_TXN_RANGE = 1000


class SubmitterRequest(BaseModel):
    """Base of requests signed by a wallet DID."""

    submitter_did: str


class NymRequest(SubmitterRequest):
    """Nym Request."""

    did: str
    verkey: str | None = None
    alias: str | None = None
    role: str | None = None


class AttribRequest(SubmitterRequest):
    """Attrib Request."""

    did: str
    hash: str | None = None
    raw: str | Mapping[str, Any] | None = None
    enc: str | None = None


class SchemaRequest(SubmitterRequest):
    """Schema publication request."""

    schema_value: Dict[str, Any] = Field(alias="schema")


class CredDefRequest(SubmitterRequest):
    """Cred def publication request."""

    cred_def: Dict[str, Any]


class RevRegDefRequest(SubmitterRequest):
    """Rev reg def publication request."""

    rev_reg_def: Dict[str, Any]


class RevRegEntryRequest(SubmitterRequest):
    """Rev reg entry publication request."""

    rev_reg_def_id: str
    rev_def_type: str = "CL_ACCUM"
    value: Dict[str, Any]


class EntityResponse(BaseModel):
    """Ledger entity with its id."""

    id: str
    value: Dict[str, Any]


class TimedEntityResponse(EntityResponse):
    """Ledger entity with its id and ledger timestamp."""

    timestamp: int


class VerifierEntitiesRequest(BaseModel):
    """Verifier entities request."""

    submitter_did: str
    identifiers: List[VerifierIdentifier]


class VerifierEntitiesResponse(BaseModel):
    """Verifier entities response."""

    schemas: Dict[str, Any]
    cred_defs: Dict[str, Any]
    rev_reg_defs: Dict[str, Any]
    rev_regs: Dict[str, Dict[int, Any]]


@router.get("/nym/{did}", tags=["Nym"], summary="Get the NYM record of a DID")
async def get_nym(
    did: str, ledger: LedgerDep, submitter_did: str | None = None
) -> Dict[str, Any]:
    return await ledger.get_nym(submitter_did, did)


@router.post("/nym", tags=["Nym"], summary="Register a DID")
async def post_nym(
    req: NymRequest, ledger: LedgerDep, store: StoreDep
) -> Dict[str, Any]:
    signer = await get_signer(store, req.submitter_did)
    return await ledger.nym_request(
        signer, req.submitter_did, req.did, req.verkey, req.alias, req.role
    )


@router.post("/attrib", tags=["Nym"], summary="Attest an attribute of a DID")
async def post_attrib(
    req: AttribRequest, ledger: LedgerDep, store: StoreDep
) -> Dict[str, Any]:
    signer = await get_signer(store, req.submitter_did)
    return await ledger.attrib_request(
        signer, req.submitter_did, req.did, req.hash, req.raw, req.enc
    )


@router.post("/schema", tags=["Schema"], summary="Publish a schema")
async def post_schema(
    req: SchemaRequest, ledger: LedgerDep, store: StoreDep
) -> Dict[str, Any]:
    signer = await get_signer(store, req.submitter_did)
    return await ledger.schema_request(signer, req.submitter_did, req.schema_value)


@router.get("/schema/{schema_id}", tags=["Schema"], summary="Get a schema")
async def get_schema(
    schema_id: str, ledger: LedgerDep, submitter_did: str | None = None
) -> EntityResponse:
    found_id, schema = await ledger.get_schema(submitter_did, schema_id)
    return EntityResponse(id=found_id, value=schema)


@router.post(
    "/cred-def", tags=["Credential Definition"], summary="Publish a cred def"
)
async def post_cred_def(
    req: CredDefRequest, ledger: LedgerDep, store: StoreDep
) -> Dict[str, Any]:
    signer = await get_signer(store, req.submitter_did)
    return await ledger.cred_def_request(signer, req.submitter_did, req.cred_def)


@router.get(
    "/cred-def/{cred_def_id}", tags=["Credential Definition"], summary="Get a cred def"
)
async def get_cred_def(
    cred_def_id: str, ledger: LedgerDep, submitter_did: str | None = None
) -> EntityResponse:
    found_id, cred_def = await ledger.get_cred_def(submitter_did, cred_def_id)
    return EntityResponse(id=found_id, value=cred_def)


@router.post(
    "/rev-reg-def", tags=["Revocation"], summary="Publish a rev reg definition"
)
async def post_rev_reg_def(
    req: RevRegDefRequest, ledger: LedgerDep, store: StoreDep
) -> Dict[str, Any]:
    signer = await get_signer(store, req.submitter_did)
    return await ledger.revoc_reg_def_request(
        signer, req.submitter_did, req.rev_reg_def
    )


@router.get(
    "/rev-reg-def/{rev_reg_def_id}",
    tags=["Revocation"],
    summary="Get a rev reg definition",
)
async def get_rev_reg_def(
    rev_reg_def_id: str, ledger: LedgerDep, submitter_did: str | None = None
) -> EntityResponse:
    found_id, rev_reg_def = await ledger.get_revoc_reg_def(
        submitter_did, rev_reg_def_id
    )
    return EntityResponse(id=found_id, value=rev_reg_def)


@router.post(
    "/rev-reg-entry", tags=["Revocation"], summary="Publish a rev reg entry"
)
async def post_rev_reg_entry(
    req: RevRegEntryRequest, ledger: LedgerDep, store: StoreDep
) -> Dict[str, Any]:
    signer = await get_signer(store, req.submitter_did)
    return await ledger.revoc_reg_entry_request(
        signer, req.submitter_did, req.rev_reg_def_id, req.rev_def_type, req.value
    )


@router.get(
    "/rev-reg/{rev_reg_def_id}",
    tags=["Revocation"],
    summary="Get the state of a rev reg at a point in time",
)
async def get_rev_reg(
    rev_reg_def_id: str,
    timestamp: int,
    ledger: LedgerDep,
    submitter_did: str | None = None,
) -> TimedEntityResponse:
    found_id, rev_reg, ledger_time = await ledger.get_revoc_reg(
        submitter_did, rev_reg_def_id, timestamp
    )
    return TimedEntityResponse(id=found_id, value=rev_reg, timestamp=ledger_time)


@router.get(
    "/rev-reg-delta/{rev_reg_def_id}",
    tags=["Revocation"],
    summary="Get the changes of a rev reg between two points in time",
)
async def get_rev_reg_delta(
    rev_reg_def_id: str,
    ledger: LedgerDep,
    from_time: int | None = None,
    to_time: int | None = None,
    submitter_did: str | None = None,
) -> TimedEntityResponse:
    found_id, delta, ledger_time = await ledger.get_revoc_reg_delta(
        submitter_did, rev_reg_def_id, from_time, to_time
    )
    return TimedEntityResponse(id=found_id, value=delta, timestamp=ledger_time)


@router.get("/txns", tags=["Transaction"], summary="Get a range of transactions")
async def get_txns(
    ledger: LedgerDep,
    store: StoreDep,
    submitter_did: str,
    seq_from: int = Query(alias="from", ge=0),
    seq_to: int = Query(alias="to", ge=0),
    ledger_type: Literal["pool", "domain", "config", "POOL", "DOMAIN", "CONFIG"] = (
        Query("domain", alias="type")
    ),
) -> List[Any]:
    """Get transactions from (inclusive) to (exclusive) by sequence number."""
    if seq_to - seq_from > MAX_TXN_RANGE:
        raise HTTPException(
            400, f"At most {MAX_TXN_RANGE} transactions may be requested at once"
        )
    signer = await get_signer(store, submitter_did)
    return await ledger.get_ledger_transactions(
        signer, submitter_did, seq_from, seq_to, ledger_type
    )


@router.post(
    "/verifier-entities",
    tags=["Verifier"],
    summary="Get the ledger entities needed to verify a proof",
)
async def post_verifier_entities(
    req: VerifierEntitiesRequest, ledger: LedgerDep
) -> VerifierEntitiesResponse:
    entities = await ledger.verifier_get_entities_from_ledger(
        req.submitter_did, req.identifiers
    )
    return VerifierEntitiesResponse(
        schemas=entities.schemas,
        cred_defs=entities.cred_defs,
        rev_reg_defs=entities.rev_reg_defs,
        rev_regs=entities.rev_regs,
    )
