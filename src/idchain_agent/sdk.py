"""Ledger SDK capability.

The gateway never talks to the ledger directly. Everything that builds, signs,
submits or parses a ledger transaction goes through a `LedgerSdk`. Responses
are always returned in the node reply envelope::

    {"op": "REPLY", "result": {...}}
    {"op": "REJECT" | "REQNACK", "reason": "..."}

`VdrLedgerSdk` implements the capability on top of indy-vdr.
"""

import json
import logging
from io import StringIO
from typing import Any, Mapping, Protocol

from indy_vdr import LedgerType, Pool, Request, VdrError, ledger, open_pool
from indy_vdr.bindings import set_protocol_version
from indy_vdr.error import VdrErrorCode

from idchain_agent.error import LedgerObjectNotFoundError
from idchain_agent.retry import REJECTED_OPS
from idchain_agent.signer import Signer, sign_message

LOGGER = logging.getLogger(__name__)


class LedgerSdk(Protocol):
    """Ledger SDK protocol."""

    async def set_protocol_version(self, version: int): ...

    async def create_pool_ledger_config(self, name: str, genesis_txn: str): ...

    async def open_pool_ledger(self, name: str) -> Any: ...

    async def close_pool_ledger(self, handle: Any): ...

    async def build_get_nym_request(
        self, submitter_did: str | None, target_did: str
    ) -> Request: ...

    async def build_nym_request(
        self,
        submitter_did: str,
        target_did: str,
        verkey: str | None,
        alias: str | None,
        role: str | None,
    ) -> Request: ...

    async def build_attrib_request(
        self,
        submitter_did: str,
        target_did: str,
        xhash: str | None,
        raw: str | None,
        enc: str | None,
    ) -> Request: ...

    async def build_schema_request(self, submitter_did: str, data: Mapping) -> Request: ...

    async def build_cred_def_request(
        self, submitter_did: str, data: Mapping
    ) -> Request: ...

    async def build_revoc_reg_def_request(
        self, submitter_did: str, data: Mapping
    ) -> Request: ...

    async def build_revoc_reg_entry_request(
        self,
        submitter_did: str,
        revoc_reg_def_id: str,
        rev_def_type: str,
        value: Mapping,
    ) -> Request: ...

    async def build_get_schema_request(
        self, submitter_did: str | None, schema_id: str
    ) -> Request: ...

    async def build_get_cred_def_request(
        self, submitter_did: str | None, cred_def_id: str
    ) -> Request: ...

    async def build_get_revoc_reg_def_request(
        self, submitter_did: str | None, revoc_reg_def_id: str
    ) -> Request: ...

    async def build_get_revoc_reg_request(
        self, submitter_did: str | None, revoc_reg_def_id: str, timestamp: int
    ) -> Request: ...

    async def build_get_revoc_reg_delta_request(
        self,
        submitter_did: str | None,
        revoc_reg_def_id: str,
        from_time: int | None,
        to_time: int,
    ) -> Request: ...

    async def build_get_txn_request(
        self, submitter_did: str | None, ledger_type: str, seq_no: int
    ) -> Request: ...

    async def submit_request(self, handle: Any, request: Request) -> dict: ...

    async def sign_and_submit_request(
        self, handle: Any, signer: Signer, submitter_did: str, request: Request
    ) -> dict: ...

    async def parse_get_schema_response(self, response: dict) -> tuple[str, dict]: ...

    async def parse_get_cred_def_response(
        self, response: dict
    ) -> tuple[str, dict]: ...

    async def parse_get_revoc_reg_def_response(
        self, response: dict
    ) -> tuple[str, dict]: ...

    async def parse_get_revoc_reg_response(
        self, response: dict
    ) -> tuple[str, dict, int]: ...

    async def parse_get_revoc_reg_delta_response(
        self, response: dict
    ) -> tuple[str, dict, int]: ...


def normalize_txns(txns: str) -> str:
    """Normalize a set of genesis transactions."""
    lines = StringIO()
    for line in txns.splitlines():
        line = line.strip()
        if line:
            lines.write(line)
            lines.write("\n")
    return lines.getvalue()


def _reply_data(response: dict, what: str) -> tuple[dict, Any]:
    """Return the result and its data, raising if the object is absent."""
    result = response["result"]
    data = result.get("data")
    if data is None:
        raise LedgerObjectNotFoundError(f"{what} not found on ledger")
    return result, data


def parse_schema(response: dict) -> tuple[str, dict]:
    """Parse a GET_SCHEMA reply into (schema_id, schema)."""
    result, data = _reply_data(response, "Schema")
    if not result.get("seqNo"):
        raise LedgerObjectNotFoundError("Schema not found on ledger")
    name = data["name"]
    version = data["version"]
    schema_id = f"{result['dest']}:2:{name}:{version}"
    return schema_id, {
        "ver": "1.0",
        "id": schema_id,
        "name": name,
        "version": version,
        "attrNames": data["attr_names"],
        "seqNo": result["seqNo"],
    }


def parse_cred_def(response: dict) -> tuple[str, dict]:
    """Parse a GET_CLAIM_DEF reply into (cred_def_id, cred_def)."""
    result, data = _reply_data(response, "Credential definition")
    schema_ref = str(result["ref"])
    signature_type = result["signature_type"]
    tag = result.get("tag", "default")
    cred_def_id = f"{result['origin']}:3:{signature_type}:{schema_ref}:{tag}"
    return cred_def_id, {
        "ver": "1.0",
        "id": cred_def_id,
        "schemaId": schema_ref,
        "type": signature_type,
        "tag": tag,
        "value": data,
    }


def parse_revoc_reg_def(response: dict) -> tuple[str, dict]:
    """Parse a GET_REVOC_REG_DEF reply into (rev_reg_def_id, rev_reg_def)."""
    _, data = _reply_data(response, "Revocation registry definition")
    revoc_reg_def = {"ver": "1.0", **data}
    return revoc_reg_def["id"], revoc_reg_def


def parse_revoc_reg(response: dict) -> tuple[str, dict, int]:
    """Parse a GET_REVOC_REG reply into (rev_reg_def_id, rev_reg, timestamp)."""
    _, data = _reply_data(response, "Revocation registry")
    return (
        data["revocRegDefId"],
        {"ver": "1.0", "value": data["value"]},
        data["txnTime"],
    )


def parse_revoc_reg_delta(response: dict) -> tuple[str, dict, int]:
    """Parse a GET_REVOC_REG_DELTA reply into (rev_reg_def_id, delta, timestamp)."""
    _, data = _reply_data(response, "Revocation registry delta")
    value = data["value"]
    delta = {
        "accum": value["accum_to"]["value"]["accum"],
        "issued": value.get("issued", []),
        "revoked": value.get("revoked", []),
    }
    accum_from = value.get("accum_from")
    if accum_from:
        delta["prev_accum"] = accum_from["value"]["accum"]
    return (
        data["revocRegDefId"],
        {"ver": "1.0", "value": delta},
        value["accum_to"]["txnTime"],
    )


def rejection_from_error(err: VdrError) -> dict:
    """Rebuild the node reply for a request indy-vdr reported as failed."""
    if err.extra:
        try:
            reply = json.loads(err.extra)
        except ValueError:
            reply = None
        if isinstance(reply, dict) and reply.get("op") in REJECTED_OPS:
            return reply
    return {"op": "REJECT", "reason": str(err)}


class VdrLedgerSdk:
    """Ledger SDK backed by indy-vdr.

    indy-vdr has no notion of named pool configurations; the genesis
    transactions registered under a pool name are kept in memory until the
    pool is opened.
    """

    def __init__(self):
        """Initialize the SDK."""
        self.pool_configs: dict[str, str] = {}

    async def set_protocol_version(self, version: int):
        """Set the ledger protocol version."""
        set_protocol_version(version)

    async def create_pool_ledger_config(self, name: str, genesis_txn: str):
        """Register the genesis transactions file for a pool name."""
        with open(genesis_txn, "r") as genesis_file:
            txns = normalize_txns(genesis_file.read())
        if not txns:
            raise ValueError(f"Empty genesis transactions in {genesis_txn}")
        self.pool_configs[name] = txns

    async def open_pool_ledger(self, name: str) -> Pool:
        """Open a configured pool."""
        txns = self.pool_configs.get(name)
        if txns is None:
            raise ValueError(f"Pool ledger config '{name}' not found")
        return await open_pool(transactions=txns)

    async def close_pool_ledger(self, handle: Pool):
        """Close an open pool."""
        handle.close()

    async def build_get_nym_request(self, submitter_did, target_did):
        return ledger.build_get_nym_request(submitter_did, target_did)

    async def build_nym_request(self, submitter_did, target_did, verkey, alias, role):
        return ledger.build_nym_request(
            submitter_did, target_did, verkey=verkey, alias=alias, role=role
        )

    async def build_attrib_request(self, submitter_did, target_did, xhash, raw, enc):
        return ledger.build_attrib_request(
            submitter_did, target_did, xhash=xhash, raw=raw, enc=enc
        )

    async def build_schema_request(self, submitter_did, data):
        return ledger.build_schema_request(submitter_did, json.dumps(data))

    async def build_cred_def_request(self, submitter_did, data):
        return ledger.build_cred_def_request(submitter_did, json.dumps(data))

    async def build_revoc_reg_def_request(self, submitter_did, data):
        return ledger.build_revoc_reg_def_request(submitter_did, json.dumps(data))

    async def build_revoc_reg_entry_request(
        self, submitter_did, revoc_reg_def_id, rev_def_type, value
    ):
        return ledger.build_revoc_reg_entry_request(
            submitter_did, revoc_reg_def_id, rev_def_type, json.dumps(value)
        )

    async def build_get_schema_request(self, submitter_did, schema_id):
        return ledger.build_get_schema_request(submitter_did, schema_id)

    async def build_get_cred_def_request(self, submitter_did, cred_def_id):
        return ledger.build_get_cred_def_request(submitter_did, cred_def_id)

    async def build_get_revoc_reg_def_request(self, submitter_did, revoc_reg_def_id):
        return ledger.build_get_revoc_reg_def_request(submitter_did, revoc_reg_def_id)

    async def build_get_revoc_reg_request(
        self, submitter_did, revoc_reg_def_id, timestamp
    ):
        return ledger.build_get_revoc_reg_request(
            submitter_did, revoc_reg_def_id, timestamp
        )

    async def build_get_revoc_reg_delta_request(
        self, submitter_did, revoc_reg_def_id, from_time, to_time
    ):
        return ledger.build_get_revoc_reg_delta_request(
            submitter_did, revoc_reg_def_id, from_time, to_time
        )

    async def build_get_txn_request(self, submitter_did, ledger_type, seq_no):
        return ledger.build_get_txn_request(
            submitter_did, LedgerType[ledger_type], seq_no
        )

    async def submit_request(self, handle: Pool, request: Request) -> dict:
        """Submit a request and wrap the result in a node reply envelope."""
        try:
            result = await handle.submit_request(request)
        except VdrError as err:
            if err.code != VdrErrorCode.POOL_REQUEST_FAILED:
                raise
            LOGGER.debug("Ledger request failed: %s", err)
            return rejection_from_error(err)
        return {"op": "REPLY", "result": result}

    async def sign_and_submit_request(
        self, handle: Pool, signer: Signer, submitter_did: str, request: Request
    ) -> dict:
        """Sign a request as the submitter DID and submit it."""
        LOGGER.debug("Signing request as %s", submitter_did)
        request.set_signature(await sign_message(signer, request.signature_input))
        return await self.submit_request(handle, request)

    async def parse_get_schema_response(self, response):
        return parse_schema(response)

    async def parse_get_cred_def_response(self, response):
        return parse_cred_def(response)

    async def parse_get_revoc_reg_def_response(self, response):
        return parse_revoc_reg_def(response)

    async def parse_get_revoc_reg_response(self, response):
        return parse_revoc_reg(response)

    async def parse_get_revoc_reg_delta_response(self, response):
        return parse_revoc_reg_delta(response)
