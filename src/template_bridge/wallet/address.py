"""
Payout address derivation.

Derives the Kaspa address credited with block rewards from the treasury
private key: secp256k1 x-only (Schnorr) public key, encoded with the Kaspa
base32 address format and its 40-bit polymod checksum.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import coincurve

from template_bridge.config import NetworkType
from template_bridge.errors import AddressDerivationError

__all__ = [
    "VERSION_PUBKEY",
    "VERSION_PUBKEY_ECDSA",
    "VERSION_SCRIPT_HASH",
    "public_key_from_private_key",
    "encode_address",
    "address_from_private_key_hex",
]

SECP_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

VERSION_PUBKEY = 0
VERSION_PUBKEY_ECDSA = 1
VERSION_SCRIPT_HASH = 8

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATORS = (0x98F2BC8E61, 0x79B76D99E2, 0xF33E5FB3C4, 0xAE2EABE2A8, 0x1E4F43E470)


def public_key_from_private_key(private_key: bytes) -> bytes:
    """
    Compute the 32-byte x-only public key for a private key.

    Raises:
        AddressDerivationError: If the key is not 32 bytes or out of range
    """
    if len(private_key) != 32:
        raise AddressDerivationError(
            f"private key must be 32 bytes, got {len(private_key)}"
        )
    secret = int.from_bytes(private_key, "big")
    if not (1 <= secret < SECP_N):
        raise AddressDerivationError("private key out of range")
    try:
        signing_key = coincurve.PrivateKey(private_key)
    except ValueError as e:
        raise AddressDerivationError(f"invalid private key: {e}")
    # Compressed SEC1 is a parity byte followed by the x-coordinate.
    return signing_key.public_key.format(compressed=True)[1:]


def _polymod(values: Iterable[int]) -> int:
    c = 1
    for d in values:
        c0 = c >> 35
        c = ((c & 0x07FFFFFFFF) << 5) ^ d
        for i, generator in enumerate(_GENERATORS):
            if (c0 >> i) & 1:
                c ^= generator
    return c ^ 1


def _convert_bits(data: bytes, from_bits: int, to_bits: int) -> List[int]:
    acc = 0
    bits = 0
    out = []
    maxv = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if bits:
        out.append((acc << (to_bits - bits)) & maxv)
    return out


def encode_address(prefix: str, version: int, payload: bytes) -> str:
    """
    Encode an address payload.

    Args:
        prefix: Network prefix (e.g. "kaspa", "kaspatest")
        version: Address version byte
        payload: Public key or script hash

    Returns:
        Address string "<prefix>:<data><checksum>"
    """
    data = _convert_bits(bytes([version]) + payload, 8, 5)
    checksum = _polymod([ord(ch) & 0x1F for ch in prefix] + [0] + data + [0] * 8)
    checksum_digits = [(checksum >> (5 * (7 - i))) & 0x1F for i in range(8)]
    return prefix + ":" + "".join(CHARSET[d] for d in data + checksum_digits)


def address_from_private_key_hex(network: NetworkType, private_key_hex: Optional[str]) -> str:
    """
    Derive the payout address for a hex-encoded private key.

    Raises:
        AddressDerivationError: If the key is missing or invalid
    """
    if not private_key_hex:
        raise AddressDerivationError("TREASURY_PRIVATE_KEY is not set")
    try:
        private_key = bytes.fromhex(private_key_hex.strip())
    except ValueError:
        raise AddressDerivationError("private key is not valid hex")

    public_key = public_key_from_private_key(private_key)
    return encode_address(network.address_prefix, VERSION_PUBKEY, public_key)
