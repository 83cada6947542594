from dataclasses import dataclass, field
from typing import List, Tuple
import logging

from resource_machine.compliance import ComplianceUnit
from resource_machine.crypto import Point, point_add
from resource_machine.logic import LogicVerifier
from resource_machine.merkle import MerkleTree
from resource_machine.proving import ProvingBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Action:
    """
    A set of consumed/created resource pairs sharing one action tree.

    Nothing is checked at construction, see `Transaction.verify`.
    """

    compliance_units: Tuple[ComplianceUnit, ...] = field(default_factory=tuple)
    logic_verifier_inputs: Tuple[LogicVerifier, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "compliance_units", tuple(self.compliance_units))
        object.__setattr__(self, "logic_verifier_inputs", tuple(self.logic_verifier_inputs))

    def tags(self) -> List[bytes]:
        """
        Leaves of the action tree: nullifier then commitment, for each
        compliance unit in order.
        """
        tags = []
        for unit in self.compliance_units:
            tags.append(unit.nullifier)
            tags.append(unit.commitment)
        return tags

    def action_tree(self) -> MerkleTree:
        return MerkleTree(self.tags())

    def delta(self) -> Point:
        return point_add(*(unit.delta_point() for unit in self.compliance_units))

    def verify_compliance_units(self, backend: ProvingBackend) -> bool:
        for i, unit in enumerate(self.compliance_units):
            if not unit.verify(backend):
                logger.warning("compliance unit %d failed to verify", i)
                return False
        return True

    def verify_logic_proofs(self, backend: ProvingBackend) -> bool:
        for i, logic in enumerate(self.logic_verifier_inputs):
            if not logic.verify(backend):
                logger.warning("logic proof %d failed to verify", i)
                return False
        return True

    def verify_consistency(self) -> bool:
        """
        Checks that the logic proofs talk about exactly the resources of the
        compliance units, inside this action's tree.
        """
        if len(self.compliance_units) == 0:
            logger.warning("action has no compliance units")
            return False

        # tag -> (is_consumed, logic_ref declared by the compliance unit)
        expected = {}
        for unit in self.compliance_units:
            expected[unit.nullifier] = (True, unit.instance.consumed_logic_ref)
            expected[unit.commitment] = (False, unit.instance.created_logic_ref)
        if len(expected) != len(self.tags()):
            logger.warning("action has duplicated tags")
            return False

        root = self.action_tree().root()
        seen = set()
        for logic in self.logic_verifier_inputs:
            instance = logic.instance
            tag = bytes(instance.tag)
            if tag not in expected:
                logger.warning("logic proof tag %s is not in the action", tag.hex())
                return False
            if tag in seen:
                logger.warning("more than one logic proof for tag %s", tag.hex())
                return False
            seen.add(tag)

            is_consumed, logic_ref = expected[tag]
            if instance.is_consumed != is_consumed:
                logger.warning("logic proof for %s has the wrong consumed flag", tag.hex())
                return False
            if bytes(instance.root) != bytes(root):
                logger.warning("logic proof for %s has a foreign action root", tag.hex())
                return False
            if bytes(logic.verifying_key) != bytes(logic_ref):
                logger.warning("logic proof for %s is not from the resource's logic", tag.hex())
                return False

        if len(seen) != len(expected):
            logger.warning("%d tags have no logic proof", len(expected) - len(seen))
            return False
        return True
