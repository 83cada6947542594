"""
Delta proofs: transaction-wide balance.

Each compliance unit publishes `delta_i = value_terms_i + G * rcv_i`. When the
value terms of a transaction cancel, `sum(delta_i) = G * sum(rcv_i)`, so a
Schnorr signature under the key `sum(rcv_i)` verified against `sum(delta_i)`
proves balance without revealing any quantity.
"""

from dataclasses import dataclass
from typing import Iterable

from resource_machine.crypto import (
    BLS_MODULUS,
    Hash,
    Point,
    generator,
    point_add,
    point_eq,
    point_from_bytes,
    point_mul,
    point_to_bytes,
    prf,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
)


@dataclass(frozen=True)
class DeltaWitness:
    signing_key: int

    def __post_init__(self):
        if not 0 <= self.signing_key < BLS_MODULUS:
            raise ValueError("delta signing key out of range")

    def __repr__(self) -> str:
        return "DeltaWitness(<secret>)"

    @staticmethod
    def from_bytes(rcv: bytes) -> "DeltaWitness":
        return DeltaWitness(scalar_from_bytes(rcv))

    @staticmethod
    def from_scalars(scalars: Iterable[bytes]) -> "DeltaWitness":
        return DeltaWitness.compress(DeltaWitness.from_bytes(s) for s in scalars)

    @staticmethod
    def compress(witnesses: Iterable["DeltaWitness"]) -> "DeltaWitness":
        return DeltaWitness(sum(w.signing_key for w in witnesses) % BLS_MODULUS)

    def to_bytes(self) -> bytes:
        return scalar_to_bytes(self.signing_key)

    def verifying_key(self) -> Point:
        return point_mul(generator(), self.signing_key)


def _challenge(commitment: bytes, verifying_key: Point, message: bytes) -> int:
    return prf(b"ARM_DELTA_CHALLENGE", commitment, point_to_bytes(verifying_key), message)


@dataclass(frozen=True)
class DeltaProof:
    commitment: bytes  # R = G * k
    response: int  # s = k + e * signing_key

    @staticmethod
    def prove(message: bytes, witness: DeltaWitness) -> "DeltaProof":
        k = random_scalar()
        commitment = point_to_bytes(point_mul(generator(), k))
        e = _challenge(commitment, witness.verifying_key(), message)
        return DeltaProof(
            commitment=commitment,
            response=(k + e * witness.signing_key) % BLS_MODULUS,
        )

    def verify(self, message: bytes, instance: Point) -> bool:
        """
        `instance` is the sum of all the delta commitments of the transaction.
        """
        try:
            r = point_from_bytes(self.commitment)
        except ValueError:
            return False
        e = _challenge(self.commitment, instance, message)
        return point_eq(
            point_mul(generator(), self.response),
            point_add(r, point_mul(instance, e)),
        )


def delta_message(tags: Iterable[bytes]) -> Hash:
    return Hash(b"ARM_DELTA_MSG", *tags)
