"""Ledger SDK double and node reply builders."""

import inspect
from pathlib import Path
from typing import Any, Callable, List

from idchain_agent.sdk import (
    parse_cred_def,
    parse_revoc_reg,
    parse_revoc_reg_def,
    parse_revoc_reg_delta,
    parse_schema,
)

POOL_HANDLE = "pool-handle"


class FakeRequest:
    """Stand-in for a built ledger request."""

    def __init__(self, kind: str, *args):
        self.kind = kind
        self.args = args

    def __repr__(self) -> str:
        return f"<FakeRequest {self.kind} {self.args}>"


class FakeLedgerSdk:
    """Ledger SDK double recording calls and serving scripted replies.

    Replies are taken in order from `replies`; a callable entry is called with
    the request to produce the reply. When `responder` is set it answers every
    request instead.
    """

    def __init__(self, replies: List[Any] | None = None):
        self.replies = list(replies or [])
        self.responder: Callable[[FakeRequest], dict] | None = None
        self.built: List[FakeRequest] = []
        self.submitted: List[tuple] = []
        self.signed: List[tuple] = []
        self.protocol_version: int | None = None
        self.configs: dict[str, str] = {}
        self.closed: List[Any] = []

    def reply(self, request: FakeRequest) -> dict:
        if self.responder:
            return self.responder(request)
        if not self.replies:
            raise AssertionError(f"No reply scripted for {request}")
        reply = self.replies.pop(0)
        if callable(reply):
            reply = reply(request)
        return reply

    def _build(self, kind: str, *args) -> FakeRequest:
        request = FakeRequest(kind, *args)
        self.built.append(request)
        return request

    async def set_protocol_version(self, version):
        self.protocol_version = version

    async def create_pool_ledger_config(self, name, genesis_txn):
        if not Path(genesis_txn).is_file():
            raise FileNotFoundError(genesis_txn)
        self.configs[name] = genesis_txn

    async def open_pool_ledger(self, name):
        assert name in self.configs
        return POOL_HANDLE

    async def close_pool_ledger(self, handle):
        self.closed.append(handle)

    async def build_get_nym_request(self, *args):
        return self._build("get_nym", *args)

    async def build_nym_request(self, *args):
        return self._build("nym", *args)

    async def build_attrib_request(self, *args):
        return self._build("attrib", *args)

    async def build_schema_request(self, *args):
        return self._build("schema", *args)

    async def build_cred_def_request(self, *args):
        return self._build("cred_def", *args)

    async def build_revoc_reg_def_request(self, *args):
        return self._build("revoc_reg_def", *args)

    async def build_revoc_reg_entry_request(self, *args):
        return self._build("revoc_reg_entry", *args)

    async def build_get_schema_request(self, *args):
        return self._build("get_schema", *args)

    async def build_get_cred_def_request(self, *args):
        return self._build("get_cred_def", *args)

    async def build_get_revoc_reg_def_request(self, *args):
        return self._build("get_revoc_reg_def", *args)

    async def build_get_revoc_reg_request(self, *args):
        return self._build("get_revoc_reg", *args)

    async def build_get_revoc_reg_delta_request(self, *args):
        return self._build("get_revoc_reg_delta", *args)

    async def build_get_txn_request(self, *args):
        return self._build("get_txn", *args)

    async def submit_request(self, handle, request):
        self.submitted.append((handle, request))
        result = self.reply(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def sign_and_submit_request(self, handle, signer, submitter_did, request):
        self.signed.append((handle, signer, submitter_did, request))
        return self.reply(request)

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


def reply(result: dict) -> dict:
    """Build a REPLY envelope."""
    return {"op": "REPLY", "result": result}


def schema_reply(dest: str, name: str, version: str, seq_no: int = 10) -> dict:
    return reply(
        {
            "type": "107",
            "dest": dest,
            "seqNo": seq_no,
            "txnTime": 1700000000,
            "data": {"name": name, "version": version, "attr_names": ["a", "b"]},
        }
    )


def cred_def_reply(origin: str, ref: int, tag: str = "default") -> dict:
    return reply(
        {
            "type": "108",
            "origin": origin,
            "ref": ref,
            "signature_type": "CL",
            "tag": tag,
            "seqNo": 20,
            "data": {"primary": {"n": "1"}},
        }
    )


def rev_reg_def_reply(rev_reg_def_id: str) -> dict:
    return reply(
        {
            "type": "115",
            "id": rev_reg_def_id,
            "seqNo": 30,
            "data": {
                "id": rev_reg_def_id,
                "revocDefType": "CL_ACCUM",
                "tag": "0",
                "credDefId": "cred-def",
                "value": {"maxCredNum": 100},
            },
        }
    )


def rev_reg_reply(rev_reg_def_id: str, accum: str, txn_time: int) -> dict:
    return reply(
        {
            "type": "116",
            "revocRegDefId": rev_reg_def_id,
            "data": {
                "revocRegDefId": rev_reg_def_id,
                "value": {"accum": accum},
                "txnTime": txn_time,
            },
        }
    )


def pending_reply() -> dict:
    """A reply from a node that has not yet seen the queried entity."""
    return reply({"type": "107", "data": None, "seqNo": None})

