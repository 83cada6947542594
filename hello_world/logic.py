"""
The hello world resource logic.

A hello world resource carries the label "Hello World". It starts its life as an
ephemeral resource holding the value 0, and is initialized into a persistent
resource holding the value 1.
"""

from dataclasses import dataclass

from resource_machine.config import load_config
from resource_machine.logic import AppData, LogicCircuit, LogicInstance, LogicProver
from resource_machine.merkle import MerklePath
from resource_machine.nullifier_key import NullifierKey
from resource_machine.proving import ensure
from resource_machine.resource import (
    Resource,
    label_ref_from_str,
    value_ref_from_int,
)

HELLO_WORLD_LABEL = "Hello World"
UNINITIALIZED_VALUE = 0
INITIALIZED_VALUE = 1


@dataclass(frozen=True)
class HelloWorldWitness(LogicCircuit):
    is_consumed: bool
    hello_world: Resource
    hello_world_existence_path: MerklePath
    nf_key: NullifierKey | None  # only needed when consuming

    def constrain(self) -> LogicInstance:
        resource = self.hello_world

        ensure(
            resource.logic_ref == load_config().verifying_key("hello_world"),
            "resource is not governed by the hello world logic",
        )
        ensure(
            resource.label_ref == label_ref_from_str(HELLO_WORLD_LABEL),
            "label must be 'Hello World'",
        )

        if not self.is_consumed:
            ensure(
                resource.value_ref == value_ref_from_int(INITIALIZED_VALUE),
                "created hello world resources must be initialized",
            )
        elif resource.is_ephemeral:
            ensure(
                resource.value_ref == value_ref_from_int(UNINITIALIZED_VALUE),
                "ephemeral hello world resources must be uninitialized",
            )

        ensure(
            not self.is_consumed or self.nf_key is not None,
            "consuming requires the nullifier key",
        )
        ensure(
            not self.is_consumed or self.nf_key.commit() == resource.nk_commitment,
            "nullifier key does not match the resource",
        )
        tag = resource.tag(self.is_consumed, self.nf_key)

        return LogicInstance(
            tag=bytes(tag),
            is_consumed=self.is_consumed,
            root=bytes(self.hello_world_existence_path.root(tag)),
            app_data=AppData(),
        )


class HelloWorldLogic(LogicProver):
    def __init__(
        self,
        is_consumed: bool,
        hello_world: Resource,
        hello_world_existence_path: MerklePath,
        nf_key: NullifierKey | None,
    ):
        self._witness = HelloWorldWitness(
            is_consumed=is_consumed,
            hello_world=hello_world,
            hello_world_existence_path=hello_world_existence_path,
            nf_key=nf_key,
        )

    @classmethod
    def verifying_key(cls) -> bytes:
        return load_config().verifying_key("hello_world")

    def witness(self) -> HelloWorldWitness:
        return self._witness
