"""Agent wallet backed by an askar store."""

import logging
from base64 import urlsafe_b64decode
from pathlib import Path
from typing import Tuple, cast

from aries_askar import Key, KeyAlg, Store
from base58 import b58encode

from idchain_agent.signer import Signer, key_signer

LOGGER = logging.getLogger(__name__)

KDF = "kdf:argon2i"


class DidNotFoundError(Exception):
    """Raised when no key is stored for a DID."""

    def __init__(self, did: str):
        """Init exception."""
        super().__init__(f"No key found for DID {did}")
        self.did = did


async def open_wallet(path: str | Path, passphrase: str) -> Store:
    """Open the wallet store, provisioning it on first use."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        LOGGER.debug("Opening wallet at %s", path)
        return await Store.open(f"sqlite://{path}", KDF, passphrase)
    LOGGER.info("Provisioning wallet at %s", path)
    return await Store.provision(f"sqlite://{path}", KDF, passphrase)


def key_from_seed(seed: str | None) -> Key:
    """Create an ed25519 key, from a seed if given."""
    if not seed:
        return Key.generate(KeyAlg.ED25519)
    if "=" in seed:
        seed_b = urlsafe_b64decode(seed)
    else:
        seed_b = seed.encode("ascii")
    return Key.from_secret_bytes(KeyAlg.ED25519, seed_b)


def did_and_verkey(key: Key) -> Tuple[str, str]:
    """Derive the DID and verkey of a key."""
    pub_bytes = key.get_public_bytes()
    did = b58encode(pub_bytes[:16]).decode()
    verkey = b58encode(pub_bytes).decode()
    return did, verkey


async def create_did(store: Store, seed: str | None = None) -> Tuple[str, str]:
    """Create and store a DID, replacing any stored key for the same DID."""
    key = key_from_seed(seed)
    did, verkey = did_and_verkey(key)
    async with store.session() as session:
        entry = await session.fetch_key(name=did, for_update=True)
        if entry:
            await session.remove_key(did)
        await session.insert_key(name=did, key=key, tags={"verkey": verkey})
    return did, verkey


async def get_did_key(store: Store, did: str) -> Key:
    """Retrieve the key of a DID."""
    async with store.session() as session:
        entry = await session.fetch_key(did)
    if not entry:
        raise DidNotFoundError(did)
    return cast(Key, entry.key)


async def get_signer(store: Store, did: str) -> Signer:
    """Retrieve a signer for a DID."""
    return key_signer(await get_did_key(store, did))
