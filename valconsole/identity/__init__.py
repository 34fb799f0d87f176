"""Identity helpers."""

from valconsole.identity.ed25519 import PUBLIC_KEY_LEN, SIGNATURE_LEN, verify_signature

__all__ = ["PUBLIC_KEY_LEN", "SIGNATURE_LEN", "verify_signature"]
