"""
Action trees: binary merkle trees over the nullifiers and commitments touched by
an action.

Building a tree and generating paths happens off-circuit. Recomputing a root from
a path (`MerklePath.root`) is what circuits do to check membership without
trusting whoever built the tree.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from resource_machine.crypto import Hash

PADDING_LEAF = Hash(b"ARM_MERKLE_PADDING")


def merkle_node(left: bytes, right: bytes) -> Hash:
    return Hash(b"ARM_MERKLE_NODE", left, right)


@dataclass(frozen=True)
class MerklePath:
    # (sibling, sibling_is_left) pairs from the leaf up to the root
    siblings: Tuple[Tuple[bytes, bool], ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "siblings", tuple(tuple(s) for s in self.siblings))

    def __len__(self):
        return len(self.siblings)

    def root(self, tag: bytes) -> bytes:
        """
        Recomputes the root implied by `tag` sitting at the leaf of this path.
        """
        node = tag
        for sibling, sibling_is_left in self.siblings:
            if sibling_is_left:
                node = merkle_node(sibling, node)
            else:
                node = merkle_node(node, sibling)
        return node


def _pad_to_power_of_2(data: List[bytes]) -> List[bytes]:
    size = 1
    while size < len(data):
        size *= 2
    return data + [PADDING_LEAF] * (size - len(data))


class MerkleTree:
    def __init__(self, leaves: Sequence[bytes]):
        if len(leaves) == 0:
            raise ValueError("cannot build a merkle tree without leaves")
        for leaf in leaves:
            if len(leaf) != 32:
                raise ValueError(f"merkle leaves must be 32 bytes, got {len(leaf)}")
        self.leaves = list(leaves)
        # layers[0] holds the padded leaves, layers[-1] holds the root
        self.layers = [_pad_to_power_of_2(self.leaves)]
        while len(self.layers[-1]) > 1:
            nodes = self.layers[-1]
            self.layers.append(
                [merkle_node(nodes[i], nodes[i + 1]) for i in range(0, len(nodes), 2)]
            )

    def root(self) -> bytes:
        return self.layers[-1][0]

    def generate_path(self, leaf: bytes) -> MerklePath:
        try:
            index = self.leaves.index(leaf)
        except ValueError:
            raise LeafNotFound(leaf) from None

        siblings = []
        for layer in self.layers[:-1]:
            if index % 2 == 0:
                siblings.append((layer[index + 1], False))
            else:
                siblings.append((layer[index - 1], True))
            index //= 2
        return MerklePath(siblings)


class LeafNotFound(Exception):
    def __init__(self, leaf: bytes):
        super().__init__(leaf)
        self.leaf = leaf

    def __str__(self):
        return f"Leaf {bytes(self.leaf).hex()} not found in merkle tree"
