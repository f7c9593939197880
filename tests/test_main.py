# tests/test_main.py
"""
测试命令行入口：参数解析、配置来源选择与 rcon 单次执行流程。
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from openttd_admin import main as cli
from openttd_admin.connection import AdminConnection
from openttd_admin.exceptions import ConfigError
from openttd_admin.protocols.codec import encode_frame
from openttd_admin.protocols.constants import AdminPacket


def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.config is None
    assert args.profile == "default"
    assert args.rcon is None
    assert args.verbose is False


def test_load_cli_config_from_toml(tmp_path: Path):
    f = tmp_path / "config.toml"
    f.write_text('[admin]\nhost = "h"\npassword = "p"\n', encoding="utf-8")
    config = cli.load_cli_config(cli.parse_args(["--config", str(f)]))
    assert config.host == "h"


def test_load_cli_config_from_env_file(tmp_path: Path):
    env = tmp_path / ".env"
    env.write_text("OTTD_ADMIN_HOST=fromenv\nOTTD_ADMIN_PASSWORD=pw\n", encoding="utf-8")

    # load_dotenv 直接写 os.environ，用 patch.dict 在结束后还原
    with patch.dict(os.environ, {}):
        config = cli.load_cli_config(cli.parse_args(["--env-file", str(env)]))
    assert config.host == "fromenv"


def test_main_config_error_exits_2(monkeypatch, tmp_path: Path):
    with patch.object(cli, "load_cli_config", side_effect=ConfigError("bad")):
        with pytest.raises(SystemExit) as exc:
            cli.main([])
    assert exc.value.code == 2


@pytest.mark.asyncio
async def test_run_rcon(valid_config, mock_net):
    """发送 JOIN + RCON，收到 rconend 后关闭连接"""
    conn = AdminConnection(valid_config, net_client=mock_net)
    mock_net.incoming.put_nowait(
        encode_frame(AdminPacket.SERVER_RCON, b"\x01\x00ok\x00")
        + encode_frame(AdminPacket.SERVER_RCON_END, b"companies\x00")
    )

    with patch.object(cli, "AdminConnection", return_value=conn):
        code = await cli.run(valid_config, "companies")

    assert code == 0
    sent_types = [call.args[0][2] for call in mock_net.send.await_args_list]
    assert sent_types == [AdminPacket.ADMIN_JOIN, AdminPacket.ADMIN_RCON, AdminPacket.ADMIN_QUIT]
