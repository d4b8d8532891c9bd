from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount

from oracle_avs.errors import ConfigurationError

# Order of the secp256k1 group; valid private keys are in [1, n).
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class Signer:
    """
    Holds one secp256k1 signing key for the lifetime of the process.

    The key is parsed once; afterwards the signer is read-only, so concurrent
    requests can share a single instance without locking.
    """

    def __init__(self, private_key_hex: str) -> None:
        key = (private_key_hex or "").strip()
        if key[:2].lower() == "0x":
            key = key[2:]
        try:
            raw = bytes.fromhex(key)
        except ValueError as exc:
            raise ConfigurationError("Signing key is not valid hex") from exc
        if len(raw) != 32:
            raise ConfigurationError(f"Signing key must be 32 bytes, got {len(raw)}")
        if not 0 < int.from_bytes(raw, "big") < SECP256K1_N:
            raise ConfigurationError("Signing key is not a valid secp256k1 scalar")
        try:
            self._account: LocalAccount = Account.from_key(raw)
        except Exception as exc:
            raise ConfigurationError("Signing key is not a valid secp256k1 scalar") from exc

    @property
    def address(self) -> str:
        """Checksummed performer address derived from the key."""
        return self._account.address

    def sign(self, message_hash: bytes) -> bytes:
        """Sign a 32-byte hash, returning the 65-byte r || s || v signature (v in {27, 28})."""
        if len(message_hash) != 32:
            raise ValueError(f"expected a 32-byte hash, got {len(message_hash)} bytes")
        signed = self._account.unsafe_sign_hash(message_hash)
        return bytes(signed.signature)

    def __repr__(self) -> str:
        return f"Signer(address={self.address})"
