# src/openttd_admin/main.py
"""
命令行入口 (CLI)

加载配置 -> 连接 -> 登录 -> 执行一条 rcon 命令或持续打印事件。

运行示例：
    openttd-admin --config config.toml --rcon "companies"
    openttd-admin --env-file .env
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import AdminConfig, load_config_from_env, load_config_from_toml
from .connection import AdminConnection
from .exceptions import AdminError, ConfigError
from .protocols.constants import UpdateFrequency, UpdateType
from .protocols.dispatcher import Event

logger = logging.getLogger("OpenttdAdminCLI")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="openttd-admin", description="OpenTTD Admin 端口命令行客户端"
    )
    parser.add_argument("--config", type=Path, help="TOML 配置文件路径")
    parser.add_argument("--profile", default="default", help="TOML 中的预设名")
    parser.add_argument(
        "--env-file", type=Path, default=None, help=".env 文件路径 (默认当前目录)"
    )
    parser.add_argument("--rcon", help="执行一条 rcon 命令后退出")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出 DEBUG 日志")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def load_cli_config(args: argparse.Namespace) -> AdminConfig:
    """优先使用 TOML 配置，否则从 .env / 环境变量加载。"""
    if args.config:
        logger.info(f"加载配置文件: {args.config}")
        return load_config_from_toml(args.config, args.profile)

    env_path = args.env_file or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)
        logger.debug(f"已加载 .env 文件: {env_path}")
    else:
        logger.debug(f"未找到 .env 文件: {env_path}，仅使用环境变量")

    return load_config_from_env()


def log_event(event: Event) -> None:
    if event.payload is None:
        logger.info(f"<{event.name}>")
    else:
        logger.info(f"<{event.name}> {event.payload}")


async def run(config: AdminConfig, rcon: str | None) -> int:
    conn = AdminConnection(config)
    conn.add_listener(log_event)

    done = asyncio.Event()
    conn.on("rconend", lambda _: done.set())
    conn.on("error", lambda _: done.set())

    try:
        await conn.connect()
        await conn.authenticate()

        if rcon:
            await conn.send_rcon(rcon)
            await done.wait()
        else:
            await conn.send_update_frequency(UpdateType.CHAT, UpdateFrequency.AUTOMATIC)
            await conn.send_update_frequency(
                UpdateType.CONSOLE, UpdateFrequency.AUTOMATIC
            )
            logger.info("已登录，正在监听事件 (按 Ctrl+C 退出)...")
            await conn.wait_closed()
    finally:
        await conn.close()

    return 1 if conn.state.last_error else 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_cli_config(args)
        logger.debug(f"配置加载完成: {config!r}")
        sys.exit(asyncio.run(run(config, args.rcon)))
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        sys.exit(2)
    except AdminError as e:
        logger.error(f"运行失败: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("收到用户中断信号 (Ctrl+C)，已退出。")


if __name__ == "__main__":
    main()
