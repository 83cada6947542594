"""
This module tests that the curve and hash helpers give us the basic behaviour
that delta commitments and proofs rely on.
"""

from unittest import TestCase

from hypothesis import given, settings, strategies as st
from py_ecc.optimized_bls12_381 import curve_order, is_inf, multiply

from resource_machine.crypto import (
    BLS_MODULUS,
    Hash,
    generator,
    hash_to_curve,
    identity,
    pedersen_commit,
    point_add,
    point_eq,
    point_from_bytes,
    point_mul,
    point_neg,
    point_to_bytes,
    prf,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
)


@st.composite
def field(draw):
    return draw(st.integers(min_value=0, max_value=BLS_MODULUS - 1))


class TestCrypto(TestCase):
    def test_hash_domain_separation(self):
        assert Hash(b"A", b"data") == Hash(b"A", b"data")
        assert Hash(b"A", b"data") != Hash(b"B", b"data")
        assert len(Hash(b"A")) == 32

    def test_prf(self):
        r1 = prf(b"TEST", b"\x00", b"\x01")
        r2 = prf(b"TEST", b"\x00", b"\x01")
        assert r1 == r2
        assert 0 <= r1 < BLS_MODULUS
        assert r1 != prf(b"TEST", b"\x00", b"\x02")

    def test_hash_to_curve(self):
        p1 = hash_to_curve(b"TEST", b"\x00", b"\x01")
        p2 = hash_to_curve(b"TEST", b"\x00", b"\x01")
        assert point_eq(p1, p2)
        assert not point_eq(p1, identity())

        p3 = hash_to_curve(b"TEST", b"\x00", b"\x02")
        assert not point_eq(p1, p3)

        # lands in the prime order subgroup
        assert is_inf(multiply(p1, curve_order))

    def test_point_encoding(self):
        p = point_mul(generator(), 12345)
        encoded = point_to_bytes(p)
        assert len(encoded) == 48
        assert point_eq(point_from_bytes(encoded), p)
        assert point_eq(point_from_bytes(point_to_bytes(identity())), identity())

        with self.assertRaises(ValueError):
            point_from_bytes(encoded[:47])

    def test_scalar_encoding(self):
        s = random_scalar()
        assert scalar_from_bytes(scalar_to_bytes(s)) == s
        assert scalar_from_bytes(scalar_to_bytes(-1)) == BLS_MODULUS - 1
        with self.assertRaises(ValueError):
            scalar_from_bytes(b"\x01")

    def test_point_negation(self):
        p = hash_to_curve(b"TEST", b"neg")
        assert point_eq(point_add(p, point_neg(p)), identity())

    @given(r=field(), a=st.integers(0, 2**64), b=st.integers(0, 2**64))
    @settings(max_examples=3, deadline=None)
    def test_value_additive(self, r, a, b):
        unit = hash_to_curve(b"T", b"unit")
        b1 = pedersen_commit(a, r, unit)
        b2 = pedersen_commit(b, r, unit)
        b3 = pedersen_commit(a + b, 2 * r, unit)

        assert point_eq(point_add(b1, b2), b3)
