from dataclasses import dataclass
from typing import List, TypeAlias
import logging

from resource_machine.action import Action
from resource_machine.crypto import Hash, point_add
from resource_machine.delta import DeltaProof, DeltaWitness, delta_message
from resource_machine.proving import ProvingBackend, default_backend

logger = logging.getLogger(__name__)

# Before `generate_delta_proof` a transaction carries the witness, afterwards the proof.
Delta: TypeAlias = DeltaWitness | DeltaProof


@dataclass
class Transaction:
    actions: List[Action]
    delta: Delta

    @staticmethod
    def create(actions: List[Action], delta: DeltaWitness) -> "Transaction":
        if not isinstance(delta, DeltaWitness):
            raise TypeError("a transaction is created from a delta witness")
        return Transaction(actions=list(actions), delta=delta)

    @staticmethod
    def compose(tx1: "Transaction", tx2: "Transaction") -> "Transaction":
        """
        Merges two transactions that have not been finalized yet.
        """
        if not (isinstance(tx1.delta, DeltaWitness) and isinstance(tx2.delta, DeltaWitness)):
            raise RuntimeError("cannot compose transactions that carry a delta proof")
        return Transaction(
            actions=tx1.actions + tx2.actions,
            delta=DeltaWitness.compress([tx1.delta, tx2.delta]),
        )

    def tags(self) -> List[bytes]:
        return [tag for action in self.actions for tag in action.tags()]

    def delta_message(self) -> Hash:
        return delta_message(self.tags())

    def generate_delta_proof(self):
        """
        Replaces the delta witness by the delta proof. The witness is discarded.
        """
        if not isinstance(self.delta, DeltaWitness):
            raise RuntimeError("delta proof was already generated")
        self.delta = DeltaProof.prove(self.delta_message(), self.delta)

    @property
    def is_finalized(self) -> bool:
        return isinstance(self.delta, DeltaProof)

    def verify(self, backend: ProvingBackend | None = None) -> bool:
        backend = backend or default_backend()

        if len(self.actions) == 0:
            logger.warning("transaction has no actions")
            return False

        if not all(action.verify_compliance_units(backend) for action in self.actions):
            return False

        if not all(action.verify_logic_proofs(backend) for action in self.actions):
            return False

        if not all(action.verify_consistency() for action in self.actions):
            return False

        # a resource may be consumed (or created) only once per transaction
        tags = self.tags()
        if len(set(tags)) != len(tags):
            logger.warning("transaction has a tag repeated across actions")
            return False

        if not self.is_finalized:
            logger.warning("transaction carries a delta witness instead of a delta proof")
            return False

        instance = point_add(*(action.delta() for action in self.actions))
        if not self.delta.verify(delta_message(tags), instance):
            logger.warning("delta proof failed to verify, transaction is unbalanced")
            return False

        return True
