# =============================================================================
# test_config.py - Assembler Configuration Tests
# =============================================================================

from pathlib import Path

import pytest

from j1asm.config import AssemblerConfig


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("J1ASM_OUTPUT", "J1ASM_BYTE_ORDER", "J1ASM_VERBOSE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAssemblerConfig:
    """Test defaults, validation and environment overrides."""

    def test_defaults(self, clean_env):
        config = AssemblerConfig.from_env()
        assert config.output == Path("out.hex")
        assert config.byte_order == "big"
        assert config.verbose is False

    def test_output_is_path(self):
        assert AssemblerConfig(output="prog.hex").output == Path("prog.hex")

    def test_byte_order_normalized(self):
        assert AssemblerConfig(byte_order="LITTLE").byte_order == "little"

    def test_bad_byte_order(self):
        with pytest.raises(ValueError):
            AssemblerConfig(byte_order="middle")

    def test_from_env(self, clean_env):
        clean_env.setenv("J1ASM_OUTPUT", "build/prog.hex")
        clean_env.setenv("J1ASM_BYTE_ORDER", "little")
        clean_env.setenv("J1ASM_VERBOSE", "yes")
        config = AssemblerConfig.from_env()
        assert config.output == Path("build/prog.hex")
        assert config.byte_order == "little"
        assert config.verbose is True

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("ON", True), ("0", False), ("no", False),
    ])
    def test_verbose_values(self, clean_env, value, expected):
        clean_env.setenv("J1ASM_VERBOSE", value)
        assert AssemblerConfig.from_env().verbose is expected

    def test_bad_byte_order_from_env(self, clean_env):
        clean_env.setenv("J1ASM_BYTE_ORDER", "middle")
        with pytest.raises(ValueError):
            AssemblerConfig.from_env()
