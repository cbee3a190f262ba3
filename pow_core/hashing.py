"""
Hash Combiner

BLAKE3 digest of ``nonce || payload``. The nonce always goes first; proofs only
validate across implementations that frame the input the same way.
"""

from blake3 import blake3

from .constants import DIGEST_SIZE


def digest(nonce: bytes, payload: bytes) -> bytes:
    """
    Hash the nonce followed by the payload.

    Args:
        nonce: Nonce bytes
        payload: Caller payload (never modified)

    Returns:
        DIGEST_SIZE-byte BLAKE3 digest
    """
    hasher = blake3()
    hasher.update(nonce)
    hasher.update(payload)
    return hasher.digest(length=DIGEST_SIZE)
