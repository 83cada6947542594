from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from resource_machine import config as config_module
from resource_machine.config import (
    COMPLIANCE_ID,
    HELLO_WORLD_ID,
    Config,
    UnknownCircuit,
    load_config,
    set_config,
)


class TestConfig(TestCase):
    def setUp(self):
        self._previous = config_module._CONFIG

    def tearDown(self):
        config_module._CONFIG = self._previous

    def test_default(self):
        config = Config.default()
        assert config.backend == "dev"
        assert config.verifying_key("compliance") == COMPLIANCE_ID
        assert config.verifying_key("hello_world") == HELLO_WORLD_ID
        assert Config.default().dev_mode_secret != config.dev_mode_secret

        with self.assertRaises(UnknownCircuit):
            config.verifying_key("missing")

    def test_load_config_is_process_wide(self):
        config_module._CONFIG = None
        assert load_config() is load_config()

        config = Config.default().replace(dev_mode_secret=b"\x07" * 32)
        set_config(config)
        assert load_config() is config

    def test_from_toml(self):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "arm.toml"
            path.write_text(
                'backend = "dev"\n'
                f'dev_mode_secret = "{"11" * 32}"\n'
                "[circuits]\n"
                f'counter = "{"22" * 32}"\n'
            )
            config = Config.from_toml(path)

        assert config.dev_mode_secret == b"\x11" * 32
        assert config.verifying_key("counter") == b"\x22" * 32
        # unlisted circuits keep their defaults
        assert config.verifying_key("hello_world") == HELLO_WORLD_ID

    def test_invalid(self):
        with self.assertRaises(ValueError):
            Config(backend="risc0", dev_mode_secret=bytes(32))
        with self.assertRaises(ValueError):
            Config(backend="dev", dev_mode_secret=bytes(32), circuits={"x": b"\x00"})
        with self.assertRaises(ValueError):
            Config(backend="dev", dev_mode_secret=b"\x11")

    def test_from_toml_short_secret(self):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "arm.toml"
            path.write_text('backend = "dev"\ndev_mode_secret = "11"\n')
            with self.assertRaises(ValueError):
                Config.from_toml(path)
