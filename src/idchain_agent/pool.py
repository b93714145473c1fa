"""Pool ledger lifecycle."""

import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any

from idchain_agent.config import (
    DEFAULT_INFO_PORT,
    POOL_GENESIS_FILE,
    TMP_GENESIS_PATH,
    PoolConfig,
)
from idchain_agent.error import LedgerConfigError
from idchain_agent.sdk import LedgerSdk
from idchain_agent.utils import FetchError, fetch

LOGGER = logging.getLogger(__name__)

PROTOCOL_VERSION = 2


def _write_safe(path: Path, content: bytes):
    """Atomically write to a file path."""
    with tempfile.NamedTemporaryFile(dir=path.parent, delete=False) as tmp:
        tmp.write(content)
        tmp_name = tmp.name
    os.replace(tmp_name, path)


class PoolState(Enum):
    """Pool lifecycle states."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    OPEN = "open"


class LedgerPool:
    """Owns the configuration and the open handle of a single ledger pool.

    The pool moves from UNCONFIGURED to CONFIGURED on `create_config` and to
    OPEN on `open_ledger`. The handle is assigned once, before any ledger
    operation is served, and is shared read-only afterwards.
    """

    def __init__(
        self,
        name: str,
        config: PoolConfig,
        sdk: LedgerSdk,
        *,
        pool_ip: str | None = None,
        info_port: int = DEFAULT_INFO_PORT,
        protocol_version: int = PROTOCOL_VERSION,
        genesis_dest: Path = TMP_GENESIS_PATH,
    ):
        """Initialize the pool.

        Args:
            name: The pool ledger configuration name
            config: The pool configuration
            sdk: The ledger SDK used to configure and open the pool
            pool_ip: Bootstrap address serving the genesis transactions
            info_port: Bootstrap port serving the genesis transactions
            protocol_version: The ledger protocol version
            genesis_dest: Where fetched genesis transactions are written
        """
        self.name = name
        self.config = config
        self.sdk = sdk
        self.pool_ip = pool_ip
        self.info_port = info_port
        self.protocol_version = protocol_version
        self.genesis_dest = genesis_dest
        self.handle: Any = None
        self.state = PoolState.UNCONFIGURED

    @property
    def is_open(self) -> bool:
        """Check whether the pool is open."""
        return self.state is PoolState.OPEN and self.handle is not None

    @property
    def genesis_url(self) -> str:
        """Address of the bootstrap genesis transactions."""
        return f"http://{self.pool_ip}:{self.info_port}/{POOL_GENESIS_FILE}"

    async def fetch_genesis(self) -> bool:
        """Fetch genesis transactions from the bootstrap peer.

        Returns whether the config now points at the fetched file. Failures are
        logged and leave the configured genesis path untouched.
        """
        LOGGER.info(
            "Get genesis file from pool IP %s port %s", self.pool_ip, self.info_port
        )
        try:
            txns = await fetch(self.genesis_url)
            _write_safe(self.genesis_dest, txns)
        except (FetchError, OSError):
            LOGGER.info(
                "Unable to retrieve pool transactions genesis from pool IP, "
                "using given genesis file",
                exc_info=True,
            )
            return False

        self.config = self.config.model_copy(
            update={"genesis_txn": str(self.genesis_dest)}
        )
        return True

    async def create_config(self):
        """Create the pool ledger configuration."""
        await self.sdk.set_protocol_version(self.protocol_version)
        if self.pool_ip and not self.config.genesis_exists():
            await self.fetch_genesis()

        LOGGER.info("Creating pool ledger config %s with %s", self.name, self.config)
        try:
            await self.sdk.create_pool_ledger_config(
                self.name, self.config.genesis_txn
            )
        except (OSError, ValueError) as err:
            raise LedgerConfigError(
                f"Error creating pool ledger config '{self.name}'"
            ) from err
        self.state = PoolState.CONFIGURED

    async def open_ledger(self):
        """Open the pool ledger connection."""
        if self.state is PoolState.UNCONFIGURED:
            raise LedgerConfigError(
                f"Pool ledger config '{self.name}' must be created before opening"
            )
        if self.state is PoolState.OPEN:
            return

        LOGGER.info("Providing pool handle for pool_name %s", self.name)
        self.handle = await self.sdk.open_pool_ledger(self.name)
        self.state = PoolState.OPEN
        LOGGER.info("Connection to pool ledger established")

    async def close(self):
        """Close the pool ledger."""
        if self.handle is not None:
            await self.sdk.close_pool_ledger(self.handle)
            self.handle = None
            self.state = PoolState.CONFIGURED
            LOGGER.info("Closed pool ledger %s", self.name)
