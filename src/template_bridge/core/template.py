"""
Block template model.

Represents a block template as returned by the node and as published on the bus.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data (node and bus use different casing)."""
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class BlockHeader:
    """
    Header fields of a block template.

    Attributes:
        version: Block version
        parents: Parent hashes grouped by block level
        hash_merkle_root: Merkle root of the template's transactions
        accepted_id_merkle_root: Merkle root of accepted transaction ids
        utxo_commitment: Commitment to the UTXO set
        timestamp: Block timestamp in milliseconds
        bits: Compact difficulty target
        nonce: Nonce placeholder (miners search this)
        daa_score: DAA score of the block
        blue_work: Accumulated blue work (hex)
        blue_score: Blue score of the block
        pruning_point: Hash of the current pruning point
    """
    version: int = 0
    parents: Tuple[Tuple[str, ...], ...] = ()
    hash_merkle_root: str = ""
    accepted_id_merkle_root: str = ""
    utxo_commitment: str = ""
    timestamp: int = 0
    bits: int = 0
    nonce: int = 0
    daa_score: int = 0
    blue_work: str = ""
    blue_score: int = 0
    pruning_point: str = ""

    @classmethod
    def from_rpc(cls, data: Mapping[str, Any]) -> "BlockHeader":
        parents_raw = _pick(data, "parentsByLevel", "parents", "Parents", default=[]) or []
        parents = []
        for level in parents_raw:
            # Node returns either plain hash lists or {"parentHashes": [...]}
            if isinstance(level, Mapping):
                level = _pick(level, "parentHashes", "ParentHashes", default=[])
            parents.append(tuple(str(h) for h in level))

        return cls(
            version=int(_pick(data, "version", "Version", default=0)),
            parents=tuple(parents),
            hash_merkle_root=str(_pick(data, "hashMerkleRoot", "HashMerkleRoot", default="")),
            accepted_id_merkle_root=str(
                _pick(data, "acceptedIdMerkleRoot", "AcceptedIDMerkleRoot", default="")
            ),
            utxo_commitment=str(_pick(data, "utxoCommitment", "UTXOCommitment", default="")),
            timestamp=int(_pick(data, "timestamp", "Timestamp", default=0)),
            bits=int(_pick(data, "bits", "Bits", default=0)),
            nonce=int(_pick(data, "nonce", "Nonce", default=0)),
            daa_score=int(_pick(data, "daaScore", "DAAScore", default=0)),
            blue_work=str(_pick(data, "blueWork", "BlueWork", default="")),
            blue_score=int(_pick(data, "blueScore", "BlueScore", default=0)),
            pruning_point=str(_pick(data, "pruningPoint", "PruningPoint", default="")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Version": self.version,
            "Parents": [{"ParentHashes": list(level)} for level in self.parents],
            "HashMerkleRoot": self.hash_merkle_root,
            "AcceptedIDMerkleRoot": self.accepted_id_merkle_root,
            "UTXOCommitment": self.utxo_commitment,
            "Timestamp": self.timestamp,
            "Bits": self.bits,
            "Nonce": self.nonce,
            "DAAScore": self.daa_score,
            "BlueWork": self.blue_work,
            "BlueScore": self.blue_score,
            "PruningPoint": self.pruning_point,
        }


@dataclass(frozen=True)
class BlockTemplate:
    """
    A mineable block template.

    Treated as an immutable value: the bridge replaces cached templates but
    never modifies one. Transactions are kept as the node sent them.
    """
    header: BlockHeader
    transactions: Tuple[Dict[str, Any], ...] = ()
    is_synced: bool = True

    @classmethod
    def from_rpc(cls, payload: Mapping[str, Any]) -> "BlockTemplate":
        """
        Build a template from a getBlockTemplate response.

        Accepts both the node's camelCase keys and the PascalCase keys used in
        published payloads.

        Raises:
            ValueError: If the payload has no block header
        """
        block = _pick(payload, "block", "Block")
        if not isinstance(block, Mapping):
            raise ValueError("block template response has no block")
        header = _pick(block, "header", "Header")
        if not isinstance(header, Mapping):
            raise ValueError("block template response has no header")

        transactions = _pick(block, "transactions", "Transactions", default=[]) or []

        return cls(
            header=BlockHeader.from_rpc(header),
            transactions=tuple(copy.deepcopy(tx) for tx in transactions),
            is_synced=bool(_pick(payload, "isSynced", "IsSynced", default=True)),
        )

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    def to_dict(self) -> Dict[str, Any]:
        """Payload shape published on the bus."""
        return {
            "Block": {
                "Header": self.header.to_dict(),
                "Transactions": [copy.deepcopy(tx) for tx in self.transactions],
            },
            "IsSynced": self.is_synced,
        }
