"""Pool configuration."""

from pathlib import Path

from pydantic import BaseModel

POOL_GENESIS_FILE = "pool_transactions_genesis"
TMP_GENESIS_PATH = Path("/tmp") / POOL_GENESIS_FILE
DEFAULT_INFO_PORT = 8001


class PoolConfig(BaseModel):
    """Pool ledger configuration."""

    genesis_txn: str

    @property
    def genesis_path(self) -> Path:
        """Genesis transactions as a path."""
        return Path(self.genesis_txn)

    def genesis_exists(self) -> bool:
        """Check whether the genesis transaction file is present locally."""
        return self.genesis_path.is_file()
