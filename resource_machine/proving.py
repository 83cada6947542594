"""
This module defines the interface to the proving system.

A circuit is identified by its verifying key. Proving runs the circuit over a
private witness (`witness.constrain()`) and returns a proof carrying the public
instance the circuit committed to. Verifying checks a proof against a circuit id
and the instance the verifier expects.

`DevModeBackend` runs circuits natively and seals their output instead of
producing a succinct argument. It is meant for development and tests: its
proofs only convince parties sharing the sealing secret.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol
import hashlib
import hmac
import logging

from resource_machine.config import DEV_MODE_SECRET_MIN_BYTES, Config, load_config

logger = logging.getLogger(__name__)


class Instance(Protocol):
    def to_bytes(self) -> bytes: ...


class Witness(Protocol):
    def constrain(self) -> Instance: ...


@dataclass(frozen=True)
class Proof:
    instance: Any  # public output of the circuit
    seal: bytes

    @property
    def journal(self) -> bytes:
        return self.instance.to_bytes()


class ProvingBackend(ABC):
    @abstractmethod
    def prove(self, circuit_id: bytes, witness: Witness) -> Proof:
        """
        Proves `witness` against the circuit `circuit_id`.

        Raises ConstraintViolation if the witness does not satisfy the circuit.
        """

    @abstractmethod
    def verify(self, circuit_id: bytes, instance: Instance, proof: Proof) -> bool:
        pass


class DevModeBackend(ProvingBackend):
    def __init__(self, secret: bytes):
        if len(secret) < DEV_MODE_SECRET_MIN_BYTES:
            raise ValueError("dev mode secret is too short")
        self._secret = secret

    def _seal(self, circuit_id: bytes, journal: bytes) -> bytes:
        return hmac.new(
            self._secret, b"ARM_DEV_SEAL" + circuit_id + journal, hashlib.sha256
        ).digest()

    def prove(self, circuit_id: bytes, witness: Witness) -> Proof:
        logger.debug("proving circuit %s", circuit_id.hex())
        instance = witness.constrain()
        return Proof(instance=instance, seal=self._seal(circuit_id, instance.to_bytes()))

    def verify(self, circuit_id: bytes, instance: Instance, proof: Proof) -> bool:
        expected = self._seal(circuit_id, instance.to_bytes())
        return hmac.compare_digest(expected, proof.seal)


def backend_from_config(config: Config) -> ProvingBackend:
    if config.backend == "dev":
        return DevModeBackend(config.dev_mode_secret)
    raise ValueError(f"unknown proving backend: {config.backend}")


def default_backend() -> ProvingBackend:
    return backend_from_config(load_config())


def ensure(condition: bool, reason: str):
    """Circuit assertion: aborts proving when `condition` does not hold"""
    if not condition:
        raise ConstraintViolation(reason)


class ConstraintViolation(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self):
        return f"Constraint violated: {self.reason}"
