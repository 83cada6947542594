from dataclasses import replace
from unittest import TestCase

from resource_machine.crypto import (
    BLS_MODULUS,
    generator,
    point_add,
    point_mul,
    random_scalar,
    scalar_to_bytes,
)
from resource_machine.delta import DeltaProof, DeltaWitness, delta_message


class TestDelta(TestCase):
    def test_prove_verify(self):
        witness = DeltaWitness(random_scalar())
        message = delta_message([b"\x01" * 32, b"\x02" * 32])
        proof = DeltaProof.prove(message, witness)

        assert proof.verify(message, witness.verifying_key())
        assert not proof.verify(delta_message([b"\x01" * 32]), witness.verifying_key())
        assert not proof.verify(message, point_mul(generator(), random_scalar()))

    def test_tampered_proof(self):
        witness = DeltaWitness(random_scalar())
        message = delta_message([])
        proof = DeltaProof.prove(message, witness)
        tampered = replace(proof, response=(proof.response + 1) % BLS_MODULUS)
        assert not tampered.verify(message, witness.verifying_key())

        garbage = replace(proof, commitment=b"\xff" * 48)
        assert not garbage.verify(message, witness.verifying_key())

    def test_compress(self):
        a, b = random_scalar(), random_scalar()
        compressed = DeltaWitness.from_scalars([scalar_to_bytes(a), scalar_to_bytes(b)])
        assert compressed.signing_key == (a + b) % BLS_MODULUS

        # the compressed key opens the sum of the individual commitments
        instance = point_add(point_mul(generator(), a), point_mul(generator(), b))
        message = delta_message([b"\x03" * 32])
        assert DeltaProof.prove(message, compressed).verify(message, instance)

    def test_from_bytes_round_trip(self):
        s = random_scalar()
        assert DeltaWitness.from_bytes(scalar_to_bytes(s)).to_bytes() == scalar_to_bytes(s)

    def test_out_of_range(self):
        with self.assertRaises(ValueError):
            DeltaWitness(BLS_MODULUS)
        with self.assertRaises(ValueError):
            DeltaWitness.from_bytes(b"\x00" * 31)
