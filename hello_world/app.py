"""
Builds a hello world transaction: consumes an ephemeral hello world resource and
creates the persistent resource it initializes.
"""

from typing import List, Tuple
import logging

from hello_world.logic import (
    HELLO_WORLD_LABEL,
    INITIALIZED_VALUE,
    UNINITIALIZED_VALUE,
    HelloWorldLogic,
)
from resource_machine.action import Action
from resource_machine.compliance import ComplianceUnit, ComplianceWitness
from resource_machine.crypto import random_bytes
from resource_machine.delta import DeltaWitness
from resource_machine.logic import LogicVerifier
from resource_machine.merkle import MerklePath, MerkleTree
from resource_machine.nullifier_key import NullifierKey, NullifierKeyCommitment
from resource_machine.proving import ProvingBackend
from resource_machine.resource import Resource, label_ref_from_str, value_ref_from_int
from resource_machine.transaction import Transaction

logger = logging.getLogger(__name__)


def generate_ephemeral_resource(nk_commitment: NullifierKeyCommitment) -> Resource:
    return Resource.create(
        logic_ref=HelloWorldLogic.verifying_key(),
        label_ref=label_ref_from_str(HELLO_WORLD_LABEL),
        quantity=1,
        value_ref=value_ref_from_int(UNINITIALIZED_VALUE),
        is_ephemeral=True,
        nonce=random_bytes(32),
        nk_commitment=nk_commitment,
    )


def generate_persistent_resource(
    consumed_resource: Resource,
    eph_nf_key: NullifierKey,
    nf_key_cm: NullifierKeyCommitment,
) -> Resource:
    """
    Derives the persistent hello world resource initialized by consuming
    `consumed_resource` with `eph_nf_key`, owned by `nf_key_cm`.
    """
    return (
        consumed_resource.as_persistent()
        .with_fresh_randomness()
        .with_nonce_from_nf(consumed_resource, eph_nf_key)
        .with_value_ref(value_ref_from_int(INITIALIZED_VALUE))
        .with_nk_commitment(nf_key_cm)
    )


def generate_compliance_proof(
    consumed_resource: Resource,
    nullifier_key: NullifierKey,
    merkle_path: MerklePath,
    created_resource: Resource,
    backend: ProvingBackend | None = None,
) -> Tuple[ComplianceUnit, bytes]:
    """
    Returns the compliance unit and the rcv the delta witness is built from.
    """
    witness = ComplianceWitness.from_resources_with_path(
        consumed_resource, nullifier_key, merkle_path, created_resource
    )
    return ComplianceUnit.create(witness, backend), witness.rcv


def generate_logic_proofs(
    consumed_resource: Resource,
    nullifier_key: NullifierKey,
    created_resource: Resource,
    backend: ProvingBackend | None = None,
) -> List[LogicVerifier]:
    """
    Proves the hello world logic for both resources, consumed first.
    """
    consumed_nf = consumed_resource.nullifier(nullifier_key)
    created_cm = created_resource.commitment()
    action_tree = MerkleTree([consumed_nf, created_cm])

    consumed_logic = HelloWorldLogic(
        True, consumed_resource, action_tree.generate_path(consumed_nf), nullifier_key
    )
    created_logic = HelloWorldLogic(
        False, created_resource, action_tree.generate_path(created_cm), None
    )
    return [consumed_logic.prove(backend), created_logic.prove(backend)]


def create_transaction(backend: ProvingBackend | None = None) -> Transaction:
    logger.info("creating ephemeral hello world resource")
    ephemeral_nf_key, ephemeral_nf_key_cm = NullifierKey.random_pair()
    consumed = generate_ephemeral_resource(ephemeral_nf_key_cm)

    logger.info("creating persistent hello world resource")
    _, persistent_nf_key_cm = NullifierKey.random_pair()
    created = generate_persistent_resource(consumed, ephemeral_nf_key, persistent_nf_key_cm)

    compliance_unit, rcv = generate_compliance_proof(
        consumed, ephemeral_nf_key, MerklePath(), created, backend
    )
    logic_proofs = generate_logic_proofs(consumed, ephemeral_nf_key, created, backend)

    action = Action([compliance_unit], logic_proofs)
    transaction = Transaction.create([action], DeltaWitness.from_bytes(rcv))
    transaction.generate_delta_proof()

    if not transaction.verify(backend):
        raise RuntimeError("hello world transaction failed to verify")
    logger.info("hello world transaction verified")
    return transaction
