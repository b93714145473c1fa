from pathlib import Path
from typing import Callable, Iterable

import pytest

from idchain_agent.config import PoolConfig
from idchain_agent.pool import LedgerPool, PoolState

from fakes import POOL_HANDLE, FakeLedgerSdk

UNIT_TEST_DIR = Path(__file__).parent


def pytest_collection_modifyitems(config, items: Iterable[pytest.Item]):
    for item in items:
        path = Path(item.fspath)
        if path.is_relative_to(UNIT_TEST_DIR):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def sdk() -> FakeLedgerSdk:
    return FakeLedgerSdk()


@pytest.fixture
def genesis_file(tmp_path: Path) -> Path:
    path = tmp_path / "genesis.txn"
    path.write_text('{"txn": {"data": {}}}\n')
    return path


@pytest.fixture
def open_pool(sdk: FakeLedgerSdk, genesis_file: Path) -> LedgerPool:
    """A pool whose handle is already open."""
    pool = LedgerPool("test", PoolConfig(genesis_txn=str(genesis_file)), sdk)
    pool.handle = POOL_HANDLE
    pool.state = PoolState.OPEN
    return pool


@pytest.fixture
def signer() -> Callable[[bytes], bytes]:
    def _sign(message: bytes) -> bytes:
        return b"signed:" + message

    return _sign
