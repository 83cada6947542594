"""
This module defines the Resource, the atomic unit of state.

A resource is never revealed. Creating one publishes its commitment, consuming
one publishes its nullifier, which only the holder of the matching nullifier
key can compute.
"""

from dataclasses import dataclass, replace

from resource_machine.crypto import Hash, Point, hash_to_curve, random_bytes
from resource_machine.nullifier_key import NullifierKey, NullifierKeyCommitment

FIELD_BYTES = 32
MAX_QUANTITY = 2**128
# numeric values occupy the low-order half of a value_ref
VALUE_INT_BYTES = 16


@dataclass(frozen=True)
class Resource:
    logic_ref: bytes  # verifying key of the logic circuit governing this resource
    label_ref: bytes
    quantity: int
    value_ref: bytes
    is_ephemeral: bool
    nonce: bytes
    nk_commitment: NullifierKeyCommitment
    rand_seed: bytes  # source of randomness for the commitment and nullifier

    def __post_init__(self):
        for name in ("logic_ref", "label_ref", "value_ref", "nonce", "rand_seed"):
            field_value = getattr(self, name)
            if not isinstance(field_value, (bytes, bytearray)):
                raise ValueError(f"{name} must be bytes, got {type(field_value)}")
            if len(field_value) != FIELD_BYTES:
                raise ValueError(
                    f"{name} must be exactly {FIELD_BYTES} bytes, got {len(field_value)}"
                )
        if not isinstance(self.is_ephemeral, bool):
            raise ValueError(f"is_ephemeral must be bool, got {type(self.is_ephemeral)}")
        if not isinstance(self.quantity, int) or not 0 <= self.quantity < MAX_QUANTITY:
            raise ValueError(f"quantity out of range: {self.quantity}")
        if not isinstance(self.nk_commitment, NullifierKeyCommitment):
            raise ValueError(f"nk_commitment is {type(self.nk_commitment)}")

    @staticmethod
    def create(
        logic_ref: bytes,
        label_ref: bytes,
        quantity: int,
        value_ref: bytes,
        is_ephemeral: bool,
        nonce: bytes,
        nk_commitment: NullifierKeyCommitment,
    ) -> "Resource":
        return Resource(
            logic_ref=bytes(logic_ref),
            label_ref=bytes(label_ref),
            quantity=quantity,
            value_ref=bytes(value_ref),
            is_ephemeral=is_ephemeral,
            nonce=bytes(nonce),
            nk_commitment=nk_commitment,
            rand_seed=random_bytes(FIELD_BYTES),
        )

    def rcm(self) -> Hash:
        return Hash(b"ARM_RCM", self.rand_seed, self.nonce)

    def psi(self) -> Hash:
        return Hash(b"ARM_PSI", self.rand_seed, self.nonce)

    def commitment(self) -> Hash:
        return Hash(
            b"ARM_RESOURCE_CM",
            self.logic_ref,
            self.label_ref,
            self.quantity.to_bytes(16, byteorder="little"),
            self.value_ref,
            bytes([self.is_ephemeral]),
            self.nonce,
            bytes(self.nk_commitment),
            self.rcm(),
        )

    def nullifier(self, nf_key: NullifierKey) -> Hash:
        """
        The nullifier that is revealed when consuming this resource.

        Only the holder of the nullifier key opening `nk_commitment` can
        compute it.
        """
        if nf_key.commit() != self.nk_commitment:
            raise InvalidNullifierKey
        return Hash(
            b"ARM_RESOURCE_NF",
            bytes(nf_key),
            self.nonce,
            self.psi(),
            self.commitment(),
        )

    def tag(self, is_consumed: bool, nf_key: NullifierKey | None) -> Hash:
        if is_consumed:
            if nf_key is None:
                raise InvalidNullifierKey
            return self.nullifier(nf_key)
        return self.commitment()

    def kind(self) -> Point:
        """Resources of the same logic and label are fungible with each other"""
        return hash_to_curve(b"ARM_KIND", self.logic_ref, self.label_ref)

    def with_fresh_randomness(self) -> "Resource":
        return replace(self, rand_seed=random_bytes(FIELD_BYTES))

    def with_nonce_from_nf(
        self, consumed: "Resource", nf_key: NullifierKey
    ) -> "Resource":
        """
        Links this resource to `consumed`: the nonce becomes the nullifier of
        the consumed resource.
        """
        return replace(self, nonce=bytes(consumed.nullifier(nf_key)))

    def with_value_ref(self, value_ref: bytes) -> "Resource":
        return replace(self, value_ref=bytes(value_ref))

    def with_nk_commitment(self, nk_commitment: NullifierKeyCommitment) -> "Resource":
        return replace(self, nk_commitment=nk_commitment)

    def as_persistent(self) -> "Resource":
        return replace(self, is_ephemeral=False)


def value_ref_from_int(value: int) -> bytes:
    """
    Little-endian encoding of `value` left-aligned in 32 bytes, right-padded with 0.
    """
    if not 0 <= value < 2 ** (8 * VALUE_INT_BYTES):
        raise ValueError(f"value does not fit in {VALUE_INT_BYTES} bytes: {value}")
    return value.to_bytes(VALUE_INT_BYTES, byteorder="little") + bytes(
        FIELD_BYTES - VALUE_INT_BYTES
    )


def value_ref_to_int(value_ref: bytes) -> int:
    if len(value_ref) != FIELD_BYTES:
        raise ValueError(f"value_ref must be {FIELD_BYTES} bytes, got {len(value_ref)}")
    if any(value_ref[VALUE_INT_BYTES:]):
        raise ValueError("value_ref does not hold a numeric value")
    return int.from_bytes(value_ref[:VALUE_INT_BYTES], byteorder="little")


def label_ref_from_bytes(raw: bytes) -> bytes:
    """
    Places `raw` at the start of a 32 byte label, zero padded.
    Anything past 32 bytes is truncated.
    """
    raw = bytes(raw[:FIELD_BYTES])
    return raw + bytes(FIELD_BYTES - len(raw))


def label_ref_from_str(text: str) -> bytes:
    return label_ref_from_bytes(text.encode("utf-8"))


def label_ref_to_str(label_ref: bytes) -> str:
    if len(label_ref) != FIELD_BYTES:
        raise ValueError(f"label_ref must be {FIELD_BYTES} bytes, got {len(label_ref)}")
    return label_ref.rstrip(b"\x00").decode("utf-8")


class InvalidNullifierKey(Exception):
    def __str__(self):
        return "Nullifier key does not open the resource's nullifier key commitment"
