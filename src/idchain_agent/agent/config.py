"""Agent configuration."""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from idchain_agent.config import DEFAULT_INFO_PORT, POOL_GENESIS_FILE, PoolConfig


class ConfigError(Exception):
    """Configuration error."""


class Config(BaseSettings):
    """Agent configuration, loaded from the environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    pool_name: str = "idchain"
    genesis_txn: str = f"./{POOL_GENESIS_FILE}"
    pool_ip: str | None = Field(
        None, validation_alias=AliasChoices("IDC_POOL_IP", "pool_ip")
    )
    pool_info_port: int = Field(
        DEFAULT_INFO_PORT,
        validation_alias=AliasChoices("IDC_POOL_INFO_PORT", "pool_info_port"),
    )
    protocol_version: int = 2
    auth: Literal["insecure", "api-key"]
    api_key: str | None = None
    wallet_path: str = "./wallet.db"
    passphrase: str

    @property
    def pool_config(self) -> PoolConfig:
        """Pool configuration."""
        return PoolConfig(genesis_txn=self.genesis_txn)
