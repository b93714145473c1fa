"""Application dependencies."""

from contextlib import asynccontextmanager
from typing import Annotated

from aries_askar import Store
from fastapi import Depends, FastAPI

from idchain_agent.agent.config import Config
from idchain_agent.agent.wallet import open_wallet
from idchain_agent.ledger import Ledger
from idchain_agent.pool import LedgerPool
from idchain_agent.sdk import VdrLedgerSdk

config: Config | None = None
pool: LedgerPool | None = None
store: Store | None = None


async def init_ledger_pool(config: Config) -> LedgerPool:
    """Configure and open the pool ledger."""
    pool = LedgerPool(
        config.pool_name,
        config.pool_config,
        VdrLedgerSdk(),
        pool_ip=config.pool_ip,
        info_port=config.pool_info_port,
        protocol_version=config.protocol_version,
    )
    await pool.create_config()
    await pool.open_ledger()
    return pool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Setup dependencies.

    The pool is opened before the server accepts requests and closed on
    shutdown.
    """
    global config, pool, store

    # Loads configuration from environment
    config = Config()  # type: ignore
    pool = await init_ledger_pool(config)
    try:
        store = await open_wallet(config.wallet_path, config.passphrase)
        try:
            yield
        finally:
            await store.close()
    finally:
        await pool.close()


def get_config() -> Config:
    """Retrieve config."""
    global config
    if config is None:
        raise RuntimeError("config is not set; did startup fail?")

    return config


ConfigDep = Annotated[Config, Depends(get_config)]


def get_store() -> Store:
    """Retrieve store.

    This is intended to be called by FastAPI.Depends.
    """
    global store

    if store is None:
        raise RuntimeError("Store is not set; did startup fail?")

    return store


StoreDep = Annotated[Store, Depends(get_store)]


def get_pool() -> LedgerPool:
    """Retrieve the pool."""
    global pool
    if pool is None:
        raise RuntimeError("Pool is not set; did startup fail?")

    return pool


PoolDep = Annotated[LedgerPool, Depends(get_pool)]


def get_ledger(pool: PoolDep) -> Ledger:
    """Retrieve a ledger over the open pool."""
    return Ledger(pool)


LedgerDep = Annotated[Ledger, Depends(get_ledger)]
