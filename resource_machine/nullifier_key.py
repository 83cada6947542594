from dataclasses import dataclass

from resource_machine.crypto import Hash, random_bytes

NULLIFIER_KEY_BYTES = 32


@dataclass(frozen=True)
class NullifierKeyCommitment:
    """
    Public half of a nullifier key pair, stored inside a resource.
    """

    inner: bytes

    def __post_init__(self):
        if len(self.inner) != NULLIFIER_KEY_BYTES:
            raise ValueError(
                f"nullifier key commitment must be {NULLIFIER_KEY_BYTES} bytes, got {len(self.inner)}"
            )

    def __bytes__(self) -> bytes:
        return bytes(self.inner)


@dataclass(frozen=True)
class NullifierKey:
    """
    Secret authorizing the computation of a resource nullifier.
    """

    inner: bytes

    def __post_init__(self):
        if len(self.inner) != NULLIFIER_KEY_BYTES:
            raise ValueError(
                f"nullifier key must be {NULLIFIER_KEY_BYTES} bytes, got {len(self.inner)}"
            )

    def __bytes__(self) -> bytes:
        return bytes(self.inner)

    def __repr__(self) -> str:
        return "NullifierKey(<secret>)"

    def commit(self) -> NullifierKeyCommitment:
        return NullifierKeyCommitment(Hash(b"ARM_NK_CM", self.inner))

    @staticmethod
    def random() -> "NullifierKey":
        return NullifierKey(random_bytes(NULLIFIER_KEY_BYTES))

    @staticmethod
    def random_pair() -> tuple["NullifierKey", NullifierKeyCommitment]:
        nf_key = NullifierKey.random()
        return nf_key, nf_key.commit()
