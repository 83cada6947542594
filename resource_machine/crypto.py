from functools import lru_cache, reduce
from hashlib import sha256
import secrets

from py_ecc.bls.g2_primitives import G1_to_pubkey, pubkey_to_G1
from py_ecc.bls.typing import G1Uncompressed
from py_ecc.optimized_bls12_381 import (
    FQ,
    G1,
    Z1,
    add,
    curve_order,
    eq,
    field_modulus,
    is_on_curve,
    b as CURVE_B,
    multiply,
    neg,
)


# !Important! The crypto primitives here must be in agreement with the proving system.
# Delta commitments and the delta proof live in the G1 group of BLS12-381.

Point = G1Uncompressed
BLS_MODULUS = curve_order

# |E(F_p)| = h * r, multiplying by h maps any curve point into the r-order subgroup
G1_COFACTOR = 0x396C8C005555E1568C00AAAB0000AAAB

POINT_BYTES = 48
SCALAR_BYTES = 32


class Hash(bytes):
    """
    Domain separated sha256 digest.
    """

    def __new__(cls, dst, *data):
        assert isinstance(dst, bytes)
        h = sha256()
        h.update(dst)
        for d in data:
            h.update(d)
        return super().__new__(cls, h.digest())

    def __deepcopy__(self, memo):
        return self


def prf(domain: bytes, *elements: bytes) -> int:
    return int.from_bytes(Hash(domain, *elements), byteorder="big") % BLS_MODULUS


def random_bytes(n: int = 32) -> bytes:
    return secrets.token_bytes(n)


def random_scalar() -> int:
    return secrets.randbelow(BLS_MODULUS - 1) + 1


def scalar_to_bytes(s: int) -> bytes:
    return int.to_bytes(s % BLS_MODULUS, length=SCALAR_BYTES, byteorder="big")


def scalar_from_bytes(b: bytes) -> int:
    if len(b) != SCALAR_BYTES:
        raise ValueError(f"scalar must be {SCALAR_BYTES} bytes, got {len(b)}")
    return int.from_bytes(b, byteorder="big") % BLS_MODULUS


def generator() -> Point:
    return G1


def identity() -> Point:
    return Z1


def point_add(*points: Point) -> Point:
    return reduce(add, points, Z1)


def point_mul(p: Point, scalar: int) -> Point:
    return multiply(p, scalar % BLS_MODULUS)


def point_neg(p: Point) -> Point:
    return neg(p)


def point_eq(p1: Point, p2: Point) -> bool:
    return eq(p1, p2)


def point_to_bytes(p: Point) -> bytes:
    return bytes(G1_to_pubkey(p))


def point_from_bytes(b: bytes) -> Point:
    if len(b) != POINT_BYTES:
        raise ValueError(f"point must be {POINT_BYTES} bytes, got {len(b)}")
    return pubkey_to_G1(b)


@lru_cache(maxsize=1024)
def hash_to_curve(domain: bytes, *elements: bytes) -> Point:
    """
    Try-and-increment hash onto the r-order subgroup of G1.

    The discrete log of the result with respect to the generator is unknown,
    which is what keeps delta commitments to different kinds independent.
    """
    p = field_modulus
    counter = 0
    while True:
        x = int.from_bytes(
            Hash(b"HASH_TO_CURVE_" + domain, counter.to_bytes(4, "big"), *elements),
            byteorder="big",
        )
        rhs = (pow(x, 3, p) + CURVE_B.n) % p
        # p = 3 mod 4, so a square root (if any) is rhs^((p+1)/4)
        y = pow(rhs, (p + 1) // 4, p)
        if y * y % p == rhs:
            point = multiply((FQ(x), FQ(y), FQ.one()), G1_COFACTOR)
            assert is_on_curve(point, CURVE_B)
            if not eq(point, Z1):
                return point
        counter += 1


def pedersen_commit(value: int, blinding: int, unit: Point) -> Point:
    return point_add(point_mul(unit, value), point_mul(G1, blinding))
