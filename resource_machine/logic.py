"""
This module defines the resource logic interface.

Resource logics are the predicates that must be satisfied in order to consume
or create a resource. The logic itself is implemented as a circuit
(`LogicCircuit.constrain`) and wrapped in a `LogicProver` that knows the
circuit's verifying key. Every logic circuit outputs the same public instance
shape, `LogicInstance`, whatever predicate it enforces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Tuple
import logging

from resource_machine.proving import Proof, ProvingBackend, default_backend

logger = logging.getLogger(__name__)


def _encode_len(n: int) -> bytes:
    return n.to_bytes(4, byteorder="big")


@dataclass(frozen=True)
class ExpirableBlob:
    blob: bytes
    deletion_criterion: int  # 0: delete after the transaction, 1: store forever

    def to_bytes(self) -> bytes:
        return _encode_len(len(self.blob)) + self.blob + bytes([self.deletion_criterion])


@dataclass(frozen=True)
class AppData:
    resource_payload: Tuple[ExpirableBlob, ...] = field(default_factory=tuple)
    discovery_payload: Tuple[ExpirableBlob, ...] = field(default_factory=tuple)
    external_payload: Tuple[ExpirableBlob, ...] = field(default_factory=tuple)
    application_payload: Tuple[ExpirableBlob, ...] = field(default_factory=tuple)

    def to_bytes(self) -> bytes:
        out = b""
        for payload in (
            self.resource_payload,
            self.discovery_payload,
            self.external_payload,
            self.application_payload,
        ):
            out += _encode_len(len(payload))
            out += b"".join(blob.to_bytes() for blob in payload)
        return out


@dataclass(frozen=True)
class LogicInstance:
    tag: bytes  # nullifier if consumed, commitment if created
    is_consumed: bool
    root: bytes  # action tree root recomputed from the tag's membership path
    app_data: AppData = field(default_factory=AppData)

    def to_bytes(self) -> bytes:
        return (
            bytes(self.tag)
            + bytes([self.is_consumed])
            + bytes(self.root)
            + self.app_data.to_bytes()
        )


class LogicCircuit(ABC):
    @abstractmethod
    def constrain(self) -> LogicInstance:
        """
        Checks the logic's predicate over the witness, raising
        ConstraintViolation when it does not hold.
        """


@dataclass(frozen=True)
class LogicVerifier:
    proof: Proof
    verifying_key: bytes

    @property
    def instance(self) -> LogicInstance:
        return self.proof.instance

    def verify(self, backend: ProvingBackend | None = None) -> bool:
        backend = backend or default_backend()
        return backend.verify(self.verifying_key, self.instance, self.proof)


class LogicProver(ABC):
    """
    Capability of an application logic: proving a witness and exposing the
    verifying key of the circuit, which is also the `logic_ref` of every
    resource it governs.
    """

    @classmethod
    @abstractmethod
    def verifying_key(cls) -> bytes:
        pass

    @abstractmethod
    def witness(self) -> LogicCircuit:
        pass

    def prove(self, backend: ProvingBackend | None = None) -> LogicVerifier:
        backend = backend or default_backend()
        verifying_key = self.verifying_key()
        logger.debug("generating logic proof for %s", type(self).__name__)
        proof = backend.prove(verifying_key, self.witness())
        return LogicVerifier(proof=proof, verifying_key=verifying_key)
