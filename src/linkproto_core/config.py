"""
链路控制协议编解码库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (.env) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "LINKPROTO_"


@dataclass(frozen=True)
class CodecConfig:
    """编解码器的强类型配置对象。

    所有字段均为只读 (frozen=True)，编解码器可以被多个线程安全共享。

    Attributes:
        fix_lengths: encode 时默认是否用计算出的长度覆盖 declared_length。
        bound_to_declared_length: 是否将尾部变长字段 (name/message)
            限定在 declared_length 之内。默认为 False (保持原始行为，
            字段一直延伸到物理缓冲区末尾)。
        log_payloads: DEBUG 日志中是否输出完整的十六进制报文。
        auth_selector: 分发器中 Auth 协议对应的 SecureFrame 选择子。
        addr_config_selector: 分发器中 Config 协议对应的 SecureFrame 选择子。
    """

    fix_lengths: bool = False
    bound_to_declared_length: bool = False
    log_payloads: bool = False
    auth_selector: int = 0x01
    addr_config_selector: int = 0x02

    def __post_init__(self) -> None:
        for name in ("auth_selector", "addr_config_selector"):
            val = getattr(self, name)
            if not 0 <= val <= 0xFF:
                raise ConfigError(f"选择子超出范围 '{name}': {val}")
        if self.auth_selector == self.addr_config_selector:
            raise ConfigError(
                f"选择子冲突: auth 与 addr_config 均为 {hex(self.auth_selector)}"
            )


def create_config_from_dict(raw_data: dict[str, Any]) -> CodecConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。未知的键会被忽略。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        CodecConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当字段格式错误时抛出。
    """
    try:
        defaults = CodecConfig()

        def _to_bool(key: str, default: bool) -> bool:
            """支持 TOML 原生布尔值以及 'true'/'1'/'yes' 等字符串"""
            if key not in raw_data:
                return default
            val = raw_data[key]
            if isinstance(val, bool):
                return val
            clean = str(val).strip().lower()
            if clean in ("true", "1", "yes", "on", "t"):
                return True
            if clean in ("false", "0", "no", "off", "f", ""):
                return False
            raise ConfigError(f"布尔值格式无效 '{key}': {val}")

        def _to_selector(key: str, default: int) -> int:
            """解析单字节选择子：支持整数、十进制字符串和 0x 前缀的十六进制。"""
            if key not in raw_data:
                return default
            val = raw_data[key]
            try:
                if isinstance(val, int) and not isinstance(val, bool):
                    num = val
                else:
                    clean = str(val).strip().lower()
                    num = int(clean, 16) if clean.startswith("0x") else int(clean)
            except ValueError:
                raise ConfigError(f"选择子格式无效 '{key}': {val}")
            if not 0 <= num <= 0xFF:
                raise ConfigError(f"选择子超出范围 '{key}': {val}")
            return num

        return CodecConfig(
            fix_lengths=_to_bool("fix_lengths", defaults.fix_lengths),
            bound_to_declared_length=_to_bool(
                "bound_to_declared_length", defaults.bound_to_declared_length
            ),
            log_payloads=_to_bool("log_payloads", defaults.log_payloads),
            auth_selector=_to_selector("auth_selector", defaults.auth_selector),
            addr_config_selector=_to_selector(
                "addr_config_selector", defaults.addr_config_selector
            ),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> CodecConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [linkproto]: 单一配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        CodecConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            if profile != "default":
                raise ConfigError(f"未找到预设: [profile.{profile}]")
        else:
            raw_config = data["profile"][profile]
    elif "linkproto" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [linkproto] 节，忽略 profile='{profile}'。")
        raw_config = data["linkproto"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env(env_file: Path | None = None) -> CodecConfig:
    """从环境变量加载配置。

    读取所有以 `LINKPROTO_` 开头的环境变量，并映射到配置字段。
    例如: `LINKPROTO_FIX_LENGTHS` -> `fix_lengths`。
    未设置任何变量时返回默认配置。

    Args:
        env_file: 可选的 .env 文件路径，存在时会先加载到进程环境中
            (已存在的环境变量优先)。

    Returns:
        CodecConfig: 配置对象。

    Raises:
        ConfigError: 指定的 .env 文件不存在或字段格式错误。
    """
    if env_file is not None:
        if not env_file.exists():
            raise ConfigError(f".env 文件未找到: {env_file}")
        load_dotenv(dotenv_path=env_file, override=False)
        logger.debug(f"已加载 .env 文件: {env_file}")

    # 字段映射表 (Config Field -> Env Suffix)
    env_map = {
        "fix_lengths": "FIX_LENGTHS",
        "bound_to_declared_length": "BOUND_TO_DECLARED_LENGTH",
        "log_payloads": "LOG_PAYLOADS",
        "auth_selector": "AUTH_SELECTOR",
        "addr_config_selector": "ADDR_CONFIG_SELECTOR",
    }

    raw_data = {}
    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"{ENV_PREFIX}{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        logger.debug("未检测到 LINKPROTO_ 前缀的环境变量，使用默认配置。")

    return create_config_from_dict(raw_data)
