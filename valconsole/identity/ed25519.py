"""Ed25519 verification of signatures produced by the remote node."""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from valconsole.utils.exceptions import SignatureError

# Ed25519: public 32 bytes, signature 64 bytes
PUBLIC_KEY_LEN = 32
SIGNATURE_LEN = 64


def verify_signature(public_key: bytes, data: bytes, signature: bytes) -> None:
    """Raise SignatureError unless ``signature`` is valid for ``data`` under ``public_key``."""
    if len(public_key) != PUBLIC_KEY_LEN:
        raise SignatureError(f"Ed25519 public key must be {PUBLIC_KEY_LEN} bytes, got {len(public_key)}")
    if len(signature) != SIGNATURE_LEN:
        raise SignatureError(f"Ed25519 signature must be {SIGNATURE_LEN} bytes, got {len(signature)}")
    key = ed25519.Ed25519PublicKey.from_public_bytes(public_key)
    try:
        key.verify(signature, data)
    except InvalidSignature as exc:
        raise SignatureError("signature returned by the node does not match its public key") from exc
