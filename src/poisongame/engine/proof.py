"""Proof verification contract.

The engine treats the zero-knowledge verifier as an opaque oracle. What it
does own is the byte-exact construction of the public inputs, which is the
property that stops either player from forging a reveal:

    bytes [0, 32)   defender's stored board commitment
    bytes [32, 64)  attacked tile index, big-endian, zero padded
    bytes [64, 96)  claimed tile type, big-endian, zero padded

Only the claimed tile type comes from the responding player. The proof
must show that this claim is the true type of the attacked tile under the
commitment fixed before play began.

Sizes follow the UltraHonk scheme (keccak oracle) used by the deployed
circuit: proofs are exactly PROOF_BYTES long and verification keys
VERIFICATION_KEY_BYTES long.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, Protocol

from poisongame.errors import VerificationKeyMalformed
from poisongame.models.match import BOARD_SIZE, COMMITMENT_BYTES, TileType

PROOF_BYTES = 14592
FIELD_BYTES = 32
PUBLIC_INPUT_COUNT = 3
PUBLIC_INPUT_BYTES = FIELD_BYTES * PUBLIC_INPUT_COUNT
VERIFICATION_KEY_BYTES = 1760


class VerificationError(Exception):
    """Raised by a verifier that cannot evaluate a proof."""


class ProofVerifier(Protocol):
    """Interface of the proof verification oracle."""

    def parse_key(self, raw: bytes) -> Any:
        """Parse stored key bytes.

        Raises:
            VerificationKeyMalformed: If the bytes are not a valid key.
        """
        ...

    def verify(self, key: Any, proof: bytes, public_inputs: bytes) -> bool:
        """Return True only if ``proof`` is valid for ``public_inputs`` under ``key``.

        May raise VerificationError for proofs that cannot be evaluated.
        """
        ...


def encode_field(value: int) -> bytes:
    """Encode a small non-negative integer as a 32-byte big-endian field element."""
    if value < 0:
        raise ValueError(f"Field element must be non-negative, got {value}")
    return value.to_bytes(FIELD_BYTES, "big")


def build_public_inputs(commitment: bytes, tile_index: int, tile_type: TileType | int) -> bytes:
    """Build the 96-byte public input vector for a tile reveal."""
    if len(commitment) != COMMITMENT_BYTES:
        raise ValueError(f"Commitment must be {COMMITMENT_BYTES} bytes, got {len(commitment)}")
    if not 0 <= tile_index < BOARD_SIZE:
        raise ValueError(f"Tile index must be in [0, {BOARD_SIZE}), got {tile_index}")
    tile_type = TileType(tile_type)

    return bytes(commitment) + encode_field(tile_index) + encode_field(int(tile_type))


def split_public_inputs(public_inputs: bytes) -> tuple[bytes, int, int]:
    """Inverse of build_public_inputs, for diagnostics."""
    if len(public_inputs) != PUBLIC_INPUT_BYTES:
        raise ValueError(f"Public inputs must be {PUBLIC_INPUT_BYTES} bytes, got {len(public_inputs)}")
    commitment = public_inputs[:FIELD_BYTES]
    tile_index = int.from_bytes(public_inputs[FIELD_BYTES : 2 * FIELD_BYTES], "big")
    tile_type = int.from_bytes(public_inputs[2 * FIELD_BYTES :], "big")
    return commitment, tile_index, tile_type


def expected_digest_proof(key: bytes, public_inputs: bytes) -> bytes:
    """The only proof DigestVerifier accepts for these inputs."""
    return hashlib.shake_256(bytes(key) + bytes(public_inputs)).digest(PROOF_BYTES)


class DigestVerifier:
    """Deterministic development verifier.

    Accepts a proof iff it equals SHAKE-256(key || public_inputs) expanded to
    PROOF_BYTES. This binds a proof to the exact commitment, tile index and
    claimed type, which is enough for local play and tests. It proves
    nothing about the board and must not guard real wagers.
    """

    def parse_key(self, raw: bytes) -> bytes:
        raw = bytes(raw)
        if len(raw) != VERIFICATION_KEY_BYTES:
            raise VerificationKeyMalformed(
                f"Verification key must be {VERIFICATION_KEY_BYTES} bytes, got {len(raw)}"
            )
        if not any(raw):
            raise VerificationKeyMalformed("Verification key is all zeros")
        return raw

    def verify(self, key: bytes, proof: bytes, public_inputs: bytes) -> bool:
        if len(public_inputs) != PUBLIC_INPUT_BYTES:
            raise VerificationError(f"Public inputs must be {PUBLIC_INPUT_BYTES} bytes")
        if len(proof) != PROOF_BYTES:
            return False
        return hmac.compare_digest(bytes(proof), expected_digest_proof(key, public_inputs))
