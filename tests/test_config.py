# =============================================================================
# test_config.py - Assembler Configuration Tests
# =============================================================================

from pathlib import Path

from asm92.config import AssemblerConfig


class TestAssemblerConfig:
    """Test configuration defaults and environment overrides."""

    def test_defaults(self):
        config = AssemblerConfig()
        assert config.carry_adjust == 2
        assert config.mapping_file == Path("mapping.conf")
        assert config.output_file == Path("ram.b")
        assert config.trace is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ASM92_CARRY_ADJUST", "1")
        monkeypatch.setenv("ASM92_MAPPING", "/tmp/my.conf")
        monkeypatch.setenv("ASM92_OUTPUT", "out.b")
        monkeypatch.setenv("ASM92_TRACE", "off")

        config = AssemblerConfig.from_env()
        assert config.carry_adjust == 1
        assert config.mapping_file == Path("/tmp/my.conf")
        assert config.output_file == Path("out.b")
        assert config.trace is False

    def test_from_env_empty(self):
        assert AssemblerConfig.from_env() == AssemblerConfig()

    def test_invalid_carry_adjust_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("ASM92_CARRY_ADJUST", "7")
        config = AssemblerConfig.from_env()
        assert config.carry_adjust == 2
        assert "ASM92_CARRY_ADJUST" in caplog.text

    def test_non_numeric_carry_adjust_ignored(self, monkeypatch):
        monkeypatch.setenv("ASM92_CARRY_ADJUST", "two")
        assert AssemblerConfig.from_env().carry_adjust == 2

    def test_trace_enabled(self, monkeypatch):
        monkeypatch.setenv("ASM92_TRACE", "1")
        assert AssemblerConfig.from_env().trace is True
