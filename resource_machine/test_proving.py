from dataclasses import dataclass
from unittest import TestCase

from resource_machine.config import Config
from resource_machine.proving import (
    ConstraintViolation,
    DevModeBackend,
    Proof,
    backend_from_config,
    ensure,
)


@dataclass(frozen=True)
class Output:
    y: int

    def to_bytes(self) -> bytes:
        return self.y.to_bytes(8, "big")


@dataclass(frozen=True)
class Bigger:
    """
    The statement "I know an `x` that is bigger than `y`".
    """

    x: int
    y: int

    def constrain(self) -> Output:
        ensure(self.x > self.y, "x must be bigger than y")
        return Output(self.y)


CIRCUIT = b"\x01" * 32


class TestDevModeBackend(TestCase):
    def setUp(self):
        self.backend = DevModeBackend(b"0123456789abcdef")

    def test_prove_and_verify(self):
        proof = self.backend.prove(CIRCUIT, Bigger(x=5, y=3))
        assert proof.instance == Output(3)
        assert proof.journal == Output(3).to_bytes()
        assert self.backend.verify(CIRCUIT, Output(3), proof)

        # If we change the public input, the proof fails to verify.
        assert not self.backend.verify(CIRCUIT, Output(4), proof)

        # Neither does it verify for another circuit
        assert not self.backend.verify(b"\x02" * 32, Output(3), proof)

    def test_unsatisfied_witness(self):
        with self.assertRaises(ConstraintViolation):
            self.backend.prove(CIRCUIT, Bigger(x=3, y=5))

    def test_forged_proof(self):
        forged = Proof(instance=Output(3), seal=bytes(32))
        assert not self.backend.verify(CIRCUIT, Output(3), forged)

    def test_proof_from_another_secret(self):
        other = DevModeBackend(b"fedcba9876543210")
        proof = other.prove(CIRCUIT, Bigger(x=5, y=3))
        assert not self.backend.verify(CIRCUIT, Output(3), proof)

    def test_backend_from_config(self):
        config = Config.default()
        backend = backend_from_config(config)
        proof = backend.prove(CIRCUIT, Bigger(x=5, y=3))
        assert backend_from_config(config).verify(CIRCUIT, Output(3), proof)

    def test_short_secret(self):
        with self.assertRaises(ValueError):
            DevModeBackend(b"short")
