"""Test ledger transaction range retrieval."""

import pytest

from idchain_agent.error import BadLedgerRequestError, LedgerRequestError
from idchain_agent.ledger import Ledger

from fakes import reply

SUBMITTER = "Th7MpTaRZVRYnPiabds81Y"


def txn(seq_no: int) -> dict:
    return {"txn": {"type": "1"}, "txnMetadata": {"seqNo": seq_no}}


@pytest.fixture
def ledger(open_pool):
    return Ledger(open_pool)


@pytest.mark.asyncio
async def test_range_skips_non_object_result(ledger, sdk, signer):
    sdk.replies = [
        reply({"seqNo": 5, "data": txn(5)}),
        {"op": "REPLY", "result": "unexpected"},
        reply({"seqNo": 7, "data": txn(7)}),
    ]

    result = await ledger.get_ledger_transactions(signer, SUBMITTER, 5, 8, "domain")

    assert result == [txn(5), txn(7)]
    assert [request.args for request in sdk.built] == [
        (SUBMITTER, "DOMAIN", 5),
        (SUBMITTER, "DOMAIN", 6),
        (SUBMITTER, "DOMAIN", 7),
    ]
    assert len(sdk.signed) == 3
    assert sdk.submitted == []


@pytest.mark.asyncio
async def test_range_skips_empty(ledger, sdk, signer):
    sdk.replies = [
        reply({"seqNo": None, "data": None}),
        reply({"seqNo": 2, "data": txn(2)}),
    ]

    result = await ledger.get_ledger_transactions(signer, SUBMITTER, 1, 3, "Pool")

    assert result == [txn(2)]
    assert sdk.built[0].args[1] == "POOL"


@pytest.mark.asyncio
async def test_empty_range(ledger, sdk, signer):
    assert await ledger.get_ledger_transactions(signer, SUBMITTER, 4, 4, "config") == []
    assert sdk.built == []


@pytest.mark.asyncio
async def test_unknown_ledger_type(ledger, sdk, signer):
    with pytest.raises(BadLedgerRequestError):
        await ledger.get_ledger_transactions(signer, SUBMITTER, 1, 2, "audit")


@pytest.mark.asyncio
async def test_range_rejection(ledger, sdk, signer):
    sdk.replies = [{"op": "REJECT", "reason": "unknown submitter"}]

    with pytest.raises(LedgerRequestError, match="unknown submitter"):
        await ledger.get_ledger_transactions(signer, SUBMITTER, 1, 3, "domain")

    assert len(sdk.signed) == 1
