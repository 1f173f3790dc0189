# tests/test_config.py
from pathlib import Path

import pytest

from linkproto_core import ConfigError
from linkproto_core.config import (
    CodecConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# --- Factory 测试 (核心逻辑) ---


def test_create_from_empty_dict_uses_defaults():
    """空字典得到默认配置"""
    config = create_config_from_dict({})
    assert config == CodecConfig()
    assert config.fix_lengths is False
    assert config.bound_to_declared_length is False
    assert config.auth_selector == 0x01
    assert config.addr_config_selector == 0x02


def test_create_from_dict_coerces_strings():
    """测试字符串形式的布尔值与十六进制选择子"""
    config = create_config_from_dict(
        {
            "fix_lengths": "true",
            "bound_to_declared_length": "1",
            "log_payloads": "no",
            "auth_selector": "0x21",
            "addr_config_selector": "34",
        }
    )
    assert config.fix_lengths is True
    assert config.bound_to_declared_length is True
    assert config.log_payloads is False
    assert config.auth_selector == 0x21
    assert config.addr_config_selector == 34


def test_invalid_bool():
    with pytest.raises(ConfigError, match="布尔值格式无效"):
        create_config_from_dict({"fix_lengths": "maybe"})


@pytest.mark.parametrize("value", ["zz", "0x1ff", 256, -1])
def test_invalid_selector(value):
    with pytest.raises(ConfigError, match="选择子"):
        create_config_from_dict({"auth_selector": value})


def test_conflicting_selectors():
    with pytest.raises(ConfigError, match="选择子冲突"):
        create_config_from_dict({"auth_selector": 5, "addr_config_selector": 5})


def test_config_is_frozen():
    config = CodecConfig()
    with pytest.raises(Exception):
        config.fix_lengths = True


# --- Loader 测试 (I/O) ---


def test_load_toml_section(tmp_path):
    """测试 [linkproto] 节"""
    f = tmp_path / "config.toml"
    f.write_text(
        """
        [linkproto]
        fix_lengths = true
        auth_selector = 9
        """,
        encoding="utf-8",
    )

    config = load_config_from_toml(f)
    assert config.fix_lengths is True
    assert config.auth_selector == 9


def test_load_toml_profile(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text(
        """
        [profile.default]
        fix_lengths = false

        [profile.lab]
        bound_to_declared_length = true
        addr_config_selector = "0x7f"
        """,
        encoding="utf-8",
    )

    assert load_config_from_toml(f).bound_to_declared_length is False
    lab = load_config_from_toml(f, profile="lab")
    assert lab.bound_to_declared_length is True
    assert lab.addr_config_selector == 0x7F


def test_load_toml_missing_profile(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text("[profile.default]\nfix_lengths = true\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="未找到预设"):
        load_config_from_toml(f, profile="nope")


def test_load_toml_root_table(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text("log_payloads = true\n", encoding="utf-8")
    assert load_config_from_toml(f).log_payloads is True


def test_load_toml_not_found():
    """测试文件不存在"""
    with pytest.raises(ConfigError, match="配置文件未找到"):
        load_config_from_toml(Path("non_existent.toml"))


def test_load_toml_broken_file(tmp_path):
    f = tmp_path / "config.toml"
    f.write_text("[linkproto\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="读取 TOML 失败"):
        load_config_from_toml(f)


def test_load_env(monkeypatch):
    monkeypatch.setenv("LINKPROTO_FIX_LENGTHS", "true")
    monkeypatch.setenv("LINKPROTO_AUTH_SELECTOR", "0x05")
    config = load_config_from_env()
    assert config.fix_lengths is True
    assert config.auth_selector == 5


def test_load_env_without_variables(monkeypatch):
    for suffix in ("FIX_LENGTHS", "BOUND_TO_DECLARED_LENGTH", "LOG_PAYLOADS",
                   "AUTH_SELECTOR", "ADDR_CONFIG_SELECTOR"):
        monkeypatch.delenv(f"LINKPROTO_{suffix}", raising=False)
    assert load_config_from_env() == CodecConfig()


def test_load_env_file(tmp_path, monkeypatch):
    """.env 文件中的变量被加载，已存在的环境变量优先"""
    # 先 setenv 再 delenv，让 monkeypatch 在测试结束后清理 load_dotenv 写入的变量
    monkeypatch.setenv("LINKPROTO_LOG_PAYLOADS", "")
    monkeypatch.delenv("LINKPROTO_LOG_PAYLOADS")
    monkeypatch.setenv("LINKPROTO_BOUND_TO_DECLARED_LENGTH", "false")
    env_file = tmp_path / ".env"
    env_file.write_text(
        "LINKPROTO_LOG_PAYLOADS=yes\nLINKPROTO_BOUND_TO_DECLARED_LENGTH=true\n",
        encoding="utf-8",
    )

    config = load_config_from_env(env_file)

    assert config.log_payloads is True
    assert config.bound_to_declared_length is False


def test_load_env_file_not_found(tmp_path):
    with pytest.raises(ConfigError, match=".env 文件未找到"):
        load_config_from_env(tmp_path / "missing.env")
