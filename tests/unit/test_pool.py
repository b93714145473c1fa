"""Test pool lifecycle and genesis bootstrap."""

from pathlib import Path

import pytest

from idchain_agent.config import PoolConfig
from idchain_agent.error import LedgerConfigError
from idchain_agent.pool import LedgerPool, PoolState
from idchain_agent.utils import FetchError

from fakes import POOL_HANDLE

GENESIS = b'{"reqSignature":{},"txn":{"data":{"alias":"Node1"}}}\n'


@pytest.fixture
def fetches(monkeypatch):
    """Record genesis fetches, serving GENESIS."""
    urls = []

    async def _fetch(url, **kwargs):
        urls.append(url)
        return GENESIS

    monkeypatch.setattr("idchain_agent.pool.fetch", _fetch)
    return urls


def make_pool(sdk, genesis: Path, tmp_path: Path, **kwargs) -> LedgerPool:
    return LedgerPool(
        "idchain",
        PoolConfig(genesis_txn=str(genesis)),
        sdk,
        genesis_dest=tmp_path / "fetched_genesis",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_create_and_open(sdk, genesis_file, tmp_path, fetches):
    pool = make_pool(sdk, genesis_file, tmp_path, pool_ip="10.0.0.2")
    assert pool.state is PoolState.UNCONFIGURED
    assert pool.handle is None

    await pool.create_config()
    assert pool.state is PoolState.CONFIGURED
    assert sdk.protocol_version == 2
    assert sdk.configs == {"idchain": str(genesis_file)}
    assert fetches == []

    await pool.open_ledger()
    assert pool.state is PoolState.OPEN
    assert pool.is_open
    assert pool.handle == POOL_HANDLE

    await pool.close()
    assert sdk.closed == [POOL_HANDLE]
    assert pool.handle is None
    assert not pool.is_open


@pytest.mark.asyncio
async def test_open_before_config(sdk, genesis_file, tmp_path):
    pool = make_pool(sdk, genesis_file, tmp_path)

    with pytest.raises(LedgerConfigError):
        await pool.open_ledger()

    assert pool.handle is None
    assert pool.state is PoolState.UNCONFIGURED


@pytest.mark.asyncio
async def test_open_after_failed_config(sdk, tmp_path, fetches):
    pool = make_pool(sdk, tmp_path / "missing", tmp_path)

    with pytest.raises(LedgerConfigError):
        await pool.create_config()
    with pytest.raises(LedgerConfigError):
        await pool.open_ledger()

    assert pool.handle is None


@pytest.mark.asyncio
async def test_no_bootstrap_without_pool_ip(sdk, tmp_path, fetches):
    pool = make_pool(sdk, tmp_path / "missing", tmp_path)

    with pytest.raises(LedgerConfigError):
        await pool.create_config()

    assert fetches == []


@pytest.mark.asyncio
async def test_no_bootstrap_without_pool_ip_genesis_present(
    sdk, genesis_file, tmp_path, fetches
):
    pool = make_pool(sdk, genesis_file, tmp_path)
    await pool.create_config()
    assert fetches == []


@pytest.mark.asyncio
async def test_bootstrap_genesis(sdk, tmp_path, fetches):
    dest = tmp_path / "fetched_genesis"
    pool = make_pool(sdk, tmp_path / "missing", tmp_path, pool_ip="10.0.0.2")

    await pool.create_config()

    assert fetches == ["http://10.0.0.2:8001/pool_transactions_genesis"]
    assert dest.read_bytes() == GENESIS
    assert pool.config.genesis_txn == str(dest)
    assert sdk.configs == {"idchain": str(dest)}


@pytest.mark.asyncio
async def test_bootstrap_info_port(sdk, tmp_path, fetches):
    pool = make_pool(
        sdk, tmp_path / "missing", tmp_path, pool_ip="pool.local", info_port=9000
    )
    await pool.create_config()
    assert fetches == ["http://pool.local:9000/pool_transactions_genesis"]


@pytest.mark.asyncio
async def test_bootstrap_failure_falls_back(sdk, genesis_file, tmp_path, monkeypatch):
    async def _fail(url, **kwargs):
        raise FetchError("unreachable")

    monkeypatch.setattr("idchain_agent.pool.fetch", _fail)
    missing = tmp_path / "missing"
    pool = make_pool(sdk, missing, tmp_path, pool_ip="10.0.0.2")

    assert not await pool.fetch_genesis()
    assert pool.config.genesis_txn == str(missing)

    with pytest.raises(LedgerConfigError):
        await pool.create_config()
    assert pool.state is PoolState.UNCONFIGURED


@pytest.mark.asyncio
async def test_bootstrap_write_failure_falls_back(sdk, tmp_path, fetches):
    missing = tmp_path / "missing"
    pool = LedgerPool(
        "idchain",
        PoolConfig(genesis_txn=str(missing)),
        sdk,
        pool_ip="10.0.0.2",
        genesis_dest=tmp_path / "no-such-dir" / "genesis",
    )

    assert not await pool.fetch_genesis()
    assert pool.config.genesis_txn == str(missing)


@pytest.mark.asyncio
async def test_bootstrap_malformed_pool_ip_falls_back(sdk, tmp_path):
    pool = make_pool(sdk, tmp_path / "missing", tmp_path, pool_ip="[::1")

    assert not await pool.fetch_genesis()
    assert pool.config.genesis_txn == str(tmp_path / "missing")
    assert not (tmp_path / "fetched_genesis").exists()
