"""Wallet API."""

from fastapi import APIRouter, Security
from pydantic import BaseModel

from idchain_agent.agent.depends import StoreDep
from idchain_agent.agent.security import client
from idchain_agent.agent.wallet import create_did

router = APIRouter(prefix="/wallet", tags=["Wallet"])


class CreateDidRequest(BaseModel):
    """Create DID request."""

    seed: str | None = None


class CreateDidResponse(BaseModel):
    """Create DID response."""

    did: str
    verkey: str


@router.post("/did", summary="Create a DID in the agent wallet")
async def post_did(
    req: CreateDidRequest,
    store: StoreDep,
    _=Security(client),
) -> CreateDidResponse:
    """Create a DID, from a seed if given, and store its key."""
    did, verkey = await create_did(store, req.seed)
    return CreateDidResponse(did=did, verkey=verkey)
