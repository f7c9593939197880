# tests/test_config.py
from pathlib import Path

import pytest

from openttd_admin import ConfigError
from openttd_admin.config import (
    DEFAULT_ADMIN_PORT,
    DEFAULT_CLIENT_NAME,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)


# --- 辅助函数：生成有效字典 ---
def _get_valid_raw_dict():
    return {
        "host": "10.0.0.5",
        "password": "secret",
        "port": "3978",
        "client_name": "bot",
        "client_version": "1.0",
        "connect_timeout": "2.5",
    }


# --- Factory 测试 (核心逻辑) ---


def test_create_valid_dict():
    """测试使用完全合法的字典创建配置"""
    config = create_config_from_dict(_get_valid_raw_dict())

    assert config.host == "10.0.0.5"
    assert config.port == 3978
    assert config.client_name == "bot"
    assert config.connect_timeout == 2.5


def test_create_defaults():
    """可选字段缺失时使用默认值"""
    config = create_config_from_dict({"host": "h", "password": "p"})

    assert config.port == DEFAULT_ADMIN_PORT
    assert config.client_name == DEFAULT_CLIENT_NAME
    assert config.client_version == "0"
    assert config.read_size == 4096


@pytest.mark.parametrize("missing", ["host", "password"])
def test_create_missing_field(missing):
    raw_data = _get_valid_raw_dict()
    del raw_data[missing]
    with pytest.raises(ConfigError, match="配置缺失"):
        create_config_from_dict(raw_data)


@pytest.mark.parametrize("port", ["abc", 0, 70000])
def test_create_invalid_port(port):
    raw_data = _get_valid_raw_dict()
    raw_data["port"] = port
    with pytest.raises(ConfigError, match="端口"):
        create_config_from_dict(raw_data)


def test_create_invalid_timeout():
    raw_data = _get_valid_raw_dict()
    raw_data["connect_timeout"] = "-1"
    with pytest.raises(ConfigError, match="大于 0"):
        create_config_from_dict(raw_data)


def test_repr_hides_password():
    config = create_config_from_dict(_get_valid_raw_dict())
    assert "secret" not in repr(config)
    assert "******" in repr(config)


# --- TOML 加载测试 ---


def test_load_toml_profile(tmp_path: Path):
    f = tmp_path / "config.toml"
    f.write_text(
        """
[profile.default]
host = "1.1.1.1"
password = "a"

[profile.lan]
host = "192.168.1.2"
password = "b"
port = 4000
""",
        encoding="utf-8",
    )

    assert load_config_from_toml(f).host == "1.1.1.1"
    lan = load_config_from_toml(f, profile="lan")
    assert lan.host == "192.168.1.2"
    assert lan.port == 4000


def test_load_toml_missing_profile(tmp_path: Path):
    f = tmp_path / "config.toml"
    f.write_text('[profile.default]\nhost = "h"\npassword = "p"\n', encoding="utf-8")
    with pytest.raises(ConfigError, match="未找到预设"):
        load_config_from_toml(f, profile="nope")


def test_load_toml_admin_section(tmp_path: Path):
    f = tmp_path / "config.toml"
    f.write_text('[admin]\nhost = "h"\npassword = "p"\n', encoding="utf-8")
    assert load_config_from_toml(f).host == "h"


def test_load_toml_root(tmp_path: Path):
    f = tmp_path / "config.toml"
    f.write_text('host = "root"\npassword = "p"\n', encoding="utf-8")
    assert load_config_from_toml(f).host == "root"


def test_load_toml_file_not_found(tmp_path: Path):
    with pytest.raises(ConfigError, match="未找到"):
        load_config_from_toml(tmp_path / "missing.toml")


def test_load_toml_invalid_syntax(tmp_path: Path):
    f = tmp_path / "config.toml"
    f.write_text("host = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="读取 TOML 失败"):
        load_config_from_toml(f)


# --- 环境变量加载测试 ---


def test_load_env(monkeypatch):
    monkeypatch.setenv("OTTD_ADMIN_HOST", "envhost")
    monkeypatch.setenv("OTTD_ADMIN_PASSWORD", "envpw")
    monkeypatch.setenv("OTTD_ADMIN_PORT", "3980")

    config = load_config_from_env()
    assert config.host == "envhost"
    assert config.port == 3980


def test_load_env_empty(monkeypatch):
    for suffix in ("HOST", "PORT", "PASSWORD", "CLIENT_NAME", "CLIENT_VERSION", "CONNECT_TIMEOUT", "READ_SIZE"):
        monkeypatch.delenv(f"OTTD_ADMIN_{suffix}", raising=False)
    with pytest.raises(ConfigError, match="OTTD_ADMIN_"):
        load_config_from_env()
