"""
Wallet helpers.

Derives the payout address used when requesting block templates.
"""

from template_bridge.wallet.address import (
    address_from_private_key_hex,
    encode_address,
    public_key_from_private_key,
)

__all__ = [
    "address_from_private_key_hex",
    "encode_address",
    "public_key_from_private_key",
]
