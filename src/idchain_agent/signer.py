"""Signing of ledger requests by a submitter key."""

from inspect import isawaitable
from typing import Awaitable, Callable

from aries_askar import Key

Signer = Callable[[bytes], bytes | Awaitable[bytes]]


async def sign_message(sign: Signer, message: bytes) -> bytes:
    """Sign a message with a synchronous or asynchronous signer."""
    signature = sign(message)
    if isawaitable(signature):
        signature = await signature
    if not isinstance(signature, bytes):
        raise TypeError(f"Signer returned {type(signature).__name__}, expected bytes")
    return signature


def key_signer(key: Key) -> Signer:
    """Create a signer from an askar key."""

    def _sign(message: bytes) -> bytes:
        return key.sign_message(message)

    return _sign
