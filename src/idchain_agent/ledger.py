"""Pool ledger gateway."""

import asyncio
import logging
from time import time
from typing import Any, Mapping, Sequence

from idchain_agent.error import ClosedPoolError, LedgerRequestError
from idchain_agent.models.verifier import VerifierEntities, VerifierIdentifier
from idchain_agent.operations import (
    Attrib,
    GetCredDef,
    GetNym,
    GetRevocReg,
    GetRevocRegDef,
    GetRevocRegDelta,
    GetSchema,
    GetTxn,
    LedgerOperation,
    Nym,
    Parsed,
    PublishCredDef,
    PublishRevocRegDef,
    PublishRevocRegEntry,
    PublishSchema,
    ReadOperation,
)
from idchain_agent.pool import LedgerPool
from idchain_agent.retry import DEFAULT_READ_RETRY, RetryPolicy, is_rejected
from idchain_agent.sdk import LedgerSdk
from idchain_agent.signer import Signer

LOGGER = logging.getLogger(__name__)


class Ledger:
    """Ledger interface over an open pool.

    Every ledger interaction passes through `execute`. Reads are submitted with
    a retry policy and parsed; writes are signed, submitted once, and the raw
    reply is returned.
    """

    def __init__(
        self,
        pool: LedgerPool,
        sdk: LedgerSdk | None = None,
        *,
        read_retry: RetryPolicy = DEFAULT_READ_RETRY,
    ):
        """Initialize the ledger.

        Args:
            pool: The pool holding the open ledger handle
            sdk: Override the SDK of the pool
            read_retry: The retry policy applied to read submissions
        """
        self.pool = pool
        self.sdk = sdk or pool.sdk
        self.read_retry = read_retry

    async def execute(
        self, operation: LedgerOperation, retry: RetryPolicy | None = None
    ) -> dict:
        """Build and submit a ledger request.

        Raises:
            ClosedPoolError: the pool is not open
            LedgerRequestError: the ledger rejected the request

        """
        if not self.pool.is_open:
            raise ClosedPoolError(
                f"Cannot submit request to closed pool '{self.pool.name}'"
            )

        request = await operation.build(self.sdk)
        LOGGER.debug(
            "Submitting %s to pool %s", type(operation).__name__, self.pool.name
        )
        submit = operation.submit if retry is None else retry.wrap(operation.submit)
        response = await submit(self.sdk, self.pool.handle, request)

        if is_rejected(response):
            LOGGER.info(
                "Ledger rejected %s (%s): %s",
                type(operation).__name__,
                response["op"],
                response["reason"],
            )
            raise LedgerRequestError(response["reason"], status=400)
        return response

    async def get(
        self, operation: ReadOperation[Parsed], retry: RetryPolicy | None = None
    ) -> Parsed:
        """Build, submit with retries, and parse a ledger query."""
        response = await self.execute(operation, retry or self.read_retry)
        return await operation.parse(self.sdk, response)

    async def get_nym(self, submitter_did: str | None, target_did: str) -> dict:
        """Retrieve the NYM record of a DID."""
        return await self.get(GetNym(submitter_did, target_did))

    async def nym_request(
        self,
        signer: Signer,
        submitter_did: str,
        target_did: str,
        verkey: str | None = None,
        alias: str | None = None,
        role: str | None = None,
    ) -> dict:
        """Register a DID on the ledger."""
        return await self.execute(
            Nym(signer, submitter_did, target_did, verkey, alias, role)
        )

    async def attrib_request(
        self,
        signer: Signer,
        submitter_did: str,
        target_did: str,
        xhash: str | None = None,
        raw: str | Mapping[str, Any] | None = None,
        enc: str | None = None,
    ) -> dict:
        """Attest an attribute of a DID."""
        return await self.execute(
            Attrib(signer, submitter_did, target_did, xhash, raw, enc)
        )

    async def schema_request(
        self, signer: Signer, submitter_did: str, data: Mapping[str, Any]
    ) -> dict:
        """Publish a schema."""
        return await self.execute(PublishSchema(signer, submitter_did, data))

    async def cred_def_request(
        self, signer: Signer, submitter_did: str, data: Mapping[str, Any]
    ) -> dict:
        """Publish a credential definition."""
        return await self.execute(PublishCredDef(signer, submitter_did, data))

    async def revoc_reg_def_request(
        self, signer: Signer, submitter_did: str, data: Mapping[str, Any]
    ) -> dict:
        """Publish a revocation registry definition."""
        return await self.execute(PublishRevocRegDef(signer, submitter_did, data))

    async def revoc_reg_entry_request(
        self,
        signer: Signer,
        submitter_did: str,
        revoc_reg_def_id: str,
        rev_def_type: str,
        value: Mapping[str, Any],
    ) -> dict:
        """Publish a revocation registry entry."""
        return await self.execute(
            PublishRevocRegEntry(
                signer, submitter_did, revoc_reg_def_id, rev_def_type, value
            )
        )

    async def get_schema(
        self, submitter_did: str | None, schema_id: str
    ) -> tuple[str, dict]:
        """Retrieve a schema as (schema_id, schema)."""
        return await self.get(GetSchema(submitter_did, schema_id))

    async def get_cred_def(
        self, submitter_did: str | None, cred_def_id: str
    ) -> tuple[str, dict]:
        """Retrieve a credential definition as (cred_def_id, cred_def)."""
        return await self.get(GetCredDef(submitter_did, cred_def_id))

    async def get_revoc_reg_def(
        self, submitter_did: str | None, revoc_reg_def_id: str
    ) -> tuple[str, dict]:
        """Retrieve a revocation registry definition."""
        return await self.get(GetRevocRegDef(submitter_did, revoc_reg_def_id))

    async def get_revoc_reg(
        self, submitter_did: str | None, revoc_reg_def_id: str, timestamp: int
    ) -> tuple[str, dict, int]:
        """Retrieve a revocation registry state at or before timestamp."""
        return await self.get(GetRevocReg(submitter_did, revoc_reg_def_id, timestamp))

    async def get_revoc_reg_delta(
        self,
        submitter_did: str | None,
        revoc_reg_def_id: str,
        from_time: int | None = None,
        to_time: int | None = None,
    ) -> tuple[str, dict, int]:
        """Retrieve revocation registry changes between two points in time."""
        if to_time is None:
            to_time = int(time())
        return await self.get(
            GetRevocRegDelta(submitter_did, revoc_reg_def_id, from_time, to_time)
        )

    async def get_ledger_transactions(
        self,
        signer: Signer,
        submitter_did: str,
        seq_from: int,
        seq_to: int,
        ledger_type: str,
    ) -> list:
        """Retrieve the data of transactions seq_from (inclusive) to seq_to.

        Missing or empty transactions are left out.
        """
        responses = []
        for seq_no in range(seq_from, seq_to):
            responses.append(
                await self.execute(GetTxn(signer, submitter_did, ledger_type, seq_no))
            )

        return [
            response["result"]["data"]
            for response in responses
            if isinstance(response.get("result"), dict)
            and response["result"].get("data") is not None
        ]

    async def _verifier_entities_for(
        self, submitter_did: str, item: VerifierIdentifier
    ) -> tuple:
        """Fetch the ledger entities referenced by one identifier bundle."""
        schema = await self.get_schema(submitter_did, item.schema_id)
        cred_def = await self.get_cred_def(submitter_did, item.cred_def_id)
        if not item.rev_reg_id:
            return schema, cred_def, None, None

        rev_reg_def = await self.get_revoc_reg_def(submitter_did, item.rev_reg_id)
        timestamp = item.timestamp if item.timestamp is not None else int(time())
        rev_reg = await self.get_revoc_reg(submitter_did, item.rev_reg_id, timestamp)
        return schema, cred_def, rev_reg_def, rev_reg

    async def verifier_get_entities_from_ledger(
        self,
        submitter_did: str,
        identifiers: Sequence[VerifierIdentifier | Mapping[str, Any]],
    ) -> VerifierEntities:
        """Retrieve the entities needed to verify a proof.

        Lookups for each identifier bundle run concurrently; results are merged
        in input order, so later occurrences of an id replace earlier ones.
        """
        items = [
            item
            if isinstance(item, VerifierIdentifier)
            else VerifierIdentifier.model_validate(item)
            for item in identifiers
        ]
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self._verifier_entities_for(submitter_did, item))
                    for item in items
                ]
        except ExceptionGroup as errors:
            # remaining lookups are cancelled; surface the first failure
            raise errors.exceptions[0]

        entities = VerifierEntities()
        for task in tasks:
            schema, cred_def, rev_reg_def, rev_reg = task.result()
            schema_id, schema_value = schema
            entities.schemas[schema_id] = schema_value
            cred_def_id, cred_def_value = cred_def
            entities.cred_defs[cred_def_id] = cred_def_value
            if rev_reg_def is None:
                continue
            rev_reg_def_id, rev_reg_def_value = rev_reg_def
            entities.rev_reg_defs[rev_reg_def_id] = rev_reg_def_value
            _, rev_reg_value, timestamp = rev_reg
            entities.add_rev_reg(rev_reg_def_id, timestamp, rev_reg_value)

        return entities
