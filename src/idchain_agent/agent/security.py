"""API Security."""

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from idchain_agent.agent.config import Config, ConfigError
from idchain_agent.agent.depends import ConfigDep

API_KEY_HEADER = APIKeyHeader(name="x-api-key", auto_error=False)


class InsecureMode:
    """No authentication mode.

    This is for testing only; do not use this.
    """

    async def check(self, key: str | None):
        """Accept any caller."""
        return


class APIKey:
    """Secure the API by API Key.

    This mode might be useful for simple deployments where only a single client
    is expected.
    """

    def __init__(self, api_key: str):
        """API Key auth."""
        self.api_key = api_key

    async def check(self, key: str | None):
        """Check validity of API Key."""
        if key != self.api_key:
            raise HTTPException(401)


def auth_provider(config: Config) -> InsecureMode | APIKey:
    """Provide authentication mechanism based on config."""
    if config.auth == "insecure":
        return InsecureMode()
    elif config.auth == "api-key":
        if config.api_key is None:
            raise ConfigError("auth mode is api-key but api_key is not set")
        return APIKey(config.api_key)
    else:
        raise ConfigError(f"Invalid auth mode {config.auth}")


async def client(config: ConfigDep, key: str | None = Security(API_KEY_HEADER)):
    """Authenticate a client request."""
    await auth_provider(config).check(key)
