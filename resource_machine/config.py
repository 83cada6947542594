from dataclasses import dataclass, field, replace
from pathlib import Path
import logging

import toml

from resource_machine.crypto import Hash, random_bytes

logger = logging.getLogger(__name__)

# verifying key of the hello world guest program
HELLO_WORLD_ID = bytes.fromhex(
    "d1dc300a67141213bd29c2cacc550aa37fa3cd062e59a977facc8826e01cfcce"
)
COMPLIANCE_ID = bytes(Hash(b"ARM_COMPLIANCE_CIRCUIT"))

BACKENDS = ("dev",)
DEV_MODE_SECRET_MIN_BYTES = 16


@dataclass(frozen=True)
class Config:
    # Which proving backend produces and checks proofs.
    backend: str
    # Secret sealing dev mode proofs. Proofs only verify inside a process
    # (or a set of processes) sharing this secret.
    dev_mode_secret: bytes
    # circuit name -> 32 byte verifying key
    circuits: dict[str, bytes] = field(default_factory=dict)

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"unknown proving backend: {self.backend}")
        if len(self.dev_mode_secret) < DEV_MODE_SECRET_MIN_BYTES:
            raise ValueError(
                f"dev mode secret must be at least {DEV_MODE_SECRET_MIN_BYTES} bytes"
            )
        for name, key in self.circuits.items():
            if len(key) != 32:
                raise ValueError(f"verifying key of {name} must be 32 bytes")

    @staticmethod
    def default() -> "Config":
        return Config(
            backend="dev",
            dev_mode_secret=random_bytes(32),
            circuits={
                "compliance": COMPLIANCE_ID,
                "hello_world": HELLO_WORLD_ID,
            },
        )

    @staticmethod
    def from_toml(path: Path | str) -> "Config":
        """
        Loads a config file of the form:

            backend = "dev"
            dev_mode_secret = "<hex>"   # optional

            [circuits]
            hello_world = "<hex verifying key>"

        Circuits not listed keep their default verifying key.
        """
        with open(path, "r") as f:
            raw = toml.load(f)

        default = Config.default()
        circuits = dict(default.circuits)
        circuits.update(
            {name: bytes.fromhex(key) for name, key in raw.get("circuits", {}).items()}
        )
        secret = raw.get("dev_mode_secret")
        return Config(
            backend=raw.get("backend", default.backend),
            dev_mode_secret=(
                bytes.fromhex(secret) if secret is not None else default.dev_mode_secret
            ),
            circuits=circuits,
        )

    def verifying_key(self, circuit: str) -> bytes:
        try:
            return self.circuits[circuit]
        except KeyError:
            raise UnknownCircuit(circuit) from None

    def replace(self, **kwarg) -> "Config":
        return replace(self, **kwarg)


_CONFIG: Config | None = None


def load_config() -> Config:
    """
    Returns the process wide config, creating the default one on first use.
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = Config.default()
    return _CONFIG


def set_config(config: Config):
    """
    Installs the process wide config. Meant to be called once at startup,
    before any proof is produced.
    """
    global _CONFIG
    logger.info("installing config with %s backend", config.backend)
    _CONFIG = config


class UnknownCircuit(Exception):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"No verifying key configured for circuit {self.name}"
