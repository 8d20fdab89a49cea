"""Tests for Chip8Config and the host key map."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from chip8_vm import Chip8Config
from chip8_vm.keymap import KEY_MAP, host_key_to_chip8, host_keys_to_chip8


class TestChip8Config:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = Chip8Config()
        assert config.instructions_per_second == 600
        assert config.timer_hz == 60
        assert config.seed is None
        assert config.cycles_per_tick == 10

    @pytest.mark.parametrize("ips,hz,expected", [
        (100, 60, 2),
        (30, 60, 1),
        (1000, 50, 20),
    ])
    def test_cycles_per_tick(self, ips, hz, expected):
        assert Chip8Config(instructions_per_second=ips, timer_hz=hz).cycles_per_tick == expected

    @pytest.mark.parametrize("kwargs", [
        {"instructions_per_second": 0},
        {"timer_hz": -60},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            Chip8Config(**kwargs)


class TestKeyMap:
    """Test host key translation."""

    def test_layout_covers_keypad(self):
        assert sorted(KEY_MAP.values()) == list(range(16))

    @pytest.mark.parametrize("host,key", [("1", 0x1), ("4", 0xC), ("w", 0x5), ("X", 0x0), ("v", 0xF)])
    def test_mapping(self, host, key):
        assert host_key_to_chip8(host) == key

    def test_unmapped(self):
        with pytest.raises(KeyError):
            host_key_to_chip8("p")

    def test_many(self):
        assert host_keys_to_chip8("qz") == [0x4, 0xA]
