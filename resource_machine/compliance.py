"""
Compliance proofs bind one consumed resource to one created resource.

The public instance reveals the consumed nullifier, the created commitment, the
logic refs of both resources and a delta commitment to the quantity moved:

    delta = kind(consumed) * q_consumed - kind(created) * q_created + G * rcv

Summed over a transaction the kind terms cancel when value is conserved, leaving
G * sum(rcv), which the delta proof opens.
"""

from dataclasses import dataclass
import logging

from resource_machine.config import load_config
from resource_machine.crypto import (
    Point,
    pedersen_commit,
    point_add,
    point_from_bytes,
    point_mul,
    point_to_bytes,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
)
from resource_machine.merkle import MerklePath
from resource_machine.nullifier_key import NullifierKey
from resource_machine.proving import (
    ConstraintViolation,
    Proof,
    ProvingBackend,
    default_backend,
    ensure,
)
from resource_machine.resource import InvalidNullifierKey, Resource

logger = logging.getLogger(__name__)


def compliance_verifying_key() -> bytes:
    return load_config().verifying_key("compliance")


@dataclass(frozen=True)
class ComplianceInstance:
    consumed_nullifier: bytes
    consumed_logic_ref: bytes
    # root of the global commitment tree the consumed resource was proven against
    consumed_commitment_tree_root: bytes
    created_commitment: bytes
    created_logic_ref: bytes
    delta: bytes  # compressed G1 point

    def to_bytes(self) -> bytes:
        return b"".join(
            [
                self.consumed_nullifier,
                self.consumed_logic_ref,
                self.consumed_commitment_tree_root,
                self.created_commitment,
                self.created_logic_ref,
                self.delta,
            ]
        )


@dataclass(frozen=True)
class ComplianceWitness:
    consumed_resource: Resource
    nf_key: NullifierKey
    merkle_path: MerklePath  # existence path of the consumed resource
    created_resource: Resource
    rcv: bytes  # delta blinding, fresh per witness

    def __repr__(self) -> str:
        return "ComplianceWitness(<private>)"

    @staticmethod
    def from_resources_with_path(
        consumed_resource: Resource,
        nf_key: NullifierKey,
        merkle_path: MerklePath,
        created_resource: Resource,
    ) -> "ComplianceWitness":
        return ComplianceWitness(
            consumed_resource=consumed_resource,
            nf_key=nf_key,
            merkle_path=merkle_path,
            created_resource=created_resource,
            rcv=scalar_to_bytes(random_scalar()),
        )

    @staticmethod
    def from_resources(
        consumed_resource: Resource, nf_key: NullifierKey, created_resource: Resource
    ) -> "ComplianceWitness":
        """For ephemeral consumed resources, which need no existence path"""
        return ComplianceWitness.from_resources_with_path(
            consumed_resource, nf_key, MerklePath(), created_resource
        )

    def delta_point(self) -> Point:
        consumed = self.consumed_resource
        created = self.created_resource
        return point_add(
            point_mul(consumed.kind(), consumed.quantity),
            pedersen_commit(-created.quantity, scalar_from_bytes(self.rcv), created.kind()),
        )

    def constrain(self) -> ComplianceInstance:
        try:
            nf = self.consumed_resource.nullifier(self.nf_key)
        except InvalidNullifierKey:
            raise ConstraintViolation(
                "nullifier key does not match the consumed resource"
            ) from None

        ensure(
            self.created_resource.nonce == nf,
            "created resource nonce must be derived from the consumed nullifier",
        )

        consumed_cm = self.consumed_resource.commitment()
        return ComplianceInstance(
            consumed_nullifier=bytes(nf),
            consumed_logic_ref=self.consumed_resource.logic_ref,
            consumed_commitment_tree_root=bytes(self.merkle_path.root(consumed_cm)),
            created_commitment=bytes(self.created_resource.commitment()),
            created_logic_ref=self.created_resource.logic_ref,
            delta=point_to_bytes(self.delta_point()),
        )


@dataclass(frozen=True)
class ComplianceUnit:
    proof: Proof

    @staticmethod
    def create(
        witness: ComplianceWitness, backend: ProvingBackend | None = None
    ) -> "ComplianceUnit":
        backend = backend or default_backend()
        logger.debug("generating compliance proof")
        return ComplianceUnit(proof=backend.prove(compliance_verifying_key(), witness))

    @property
    def instance(self) -> ComplianceInstance:
        return self.proof.instance

    @property
    def nullifier(self) -> bytes:
        return self.instance.consumed_nullifier

    @property
    def commitment(self) -> bytes:
        return self.instance.created_commitment

    def delta_point(self) -> Point:
        return point_from_bytes(self.instance.delta)

    def verify(self, backend: ProvingBackend | None = None) -> bool:
        backend = backend or default_backend()
        return backend.verify(compliance_verifying_key(), self.instance, self.proof)
