# src/linkproto_core/main.py
"""
linkproto-decode 命令行工具

将十六进制文本形式的报文解码并逐层打印，便于排查抓包数据。

用法示例:
    linkproto-decode 01030100066f6b
    echo "01 00 0b c0 a8 01 01 ff ff ff 00" | linkproto-decode -p config
"""

import argparse
import logging
import sys
from dataclasses import replace
from enum import IntEnum
from pathlib import Path

from .config import CodecConfig, load_config_from_env, load_config_from_toml
from .dispatch import default_dispatcher
from .exceptions import ConfigError, ProtocolError
from .feedback import TruncationFlag
from .protocols import (
    AuthCodec,
    AuthRecord,
    ConfigCodec,
    ConfigRecord,
    DecodedLayer,
    FrameRecord,
    OfferBody,
    ValueBody,
)

logger = logging.getLogger("linkproto.cli")

EXIT_OK = 0
EXIT_DECODE_ERROR = 1
EXIT_USAGE_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkproto-decode",
        description="解码 Auth / Config / SecureFrame 链路控制报文",
    )
    parser.add_argument("hex", nargs="?", help="十六进制报文 (缺省时从 stdin 读取)")
    parser.add_argument(
        "-p",
        "--protocol",
        choices=("frame", "auth", "config"),
        default="frame",
        help="最外层协议 (默认 frame，即 SecureFrame + 内层协议)",
    )
    parser.add_argument("--config", type=Path, help="TOML 配置文件路径")
    parser.add_argument("--profile", default="default", help="TOML 配置预设名")
    parser.add_argument("--env-file", type=Path, help=".env 文件路径")
    parser.add_argument(
        "--bounded",
        action="store_true",
        help="将尾部变长字段限定在声明长度之内",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    return parser


def parse_hex(text: str) -> bytes:
    """解析十六进制文本：支持 0x 前缀、空格、冒号分隔。

    Raises:
        ValueError: 文本不是合法的十六进制。
    """
    clean = (
        text.strip()
        .lower()
        .replace("0x", "")
        .replace("\\x", "")
        .replace(":", "")
        .replace(" ", "")
        .replace("\n", "")
    )
    return bytes.fromhex(clean)


def load_cli_config(args: argparse.Namespace) -> CodecConfig:
    """按命令行参数加载配置：TOML 优先，其次环境变量 (.env)。"""
    if args.config is not None:
        config = load_config_from_toml(args.config, args.profile)
    else:
        config = load_config_from_env(args.env_file)

    if args.bounded:
        config = replace(config, bound_to_declared_length=True)
    return config


def _code_name(code: int) -> str:
    return f"{code.name}({int(code)})" if isinstance(code, IntEnum) else str(code)


def describe_record(record: object) -> str:
    """生成单条记录的可读描述。"""
    if isinstance(record, FrameRecord):
        return f"SecureFrame selector={hex(record.selector)}"
    if isinstance(record, AuthRecord):
        head = (
            f"Auth code={_code_name(record.code)}"
            f" id={record.identifier} length={record.declared_length}"
        )
        if isinstance(record.body, ValueBody):
            return (
                f"{head} value_size={record.value_size} value={record.value.hex()}"
                f" name={record.name!r}"
            )
        return f"{head} message={record.message!r}"
    if isinstance(record, ConfigRecord):
        head = f"Config code={_code_name(record.code)} length={record.declared_length}"
        if isinstance(record.body, OfferBody):
            return f"{head} address={record.address} mask={record.subnet_mask}"
        return f"{head} message={record.message!r}"
    return repr(record)


def format_layers(layers: tuple[DecodedLayer, ...]) -> list[str]:
    lines = []
    for depth, layer in enumerate(layers):
        lines.append(f"[{depth}] {describe_record(layer.record)}")
        lines.append(f"    contents={layer.contents.hex()} payload={layer.payload.hex()}")
    return lines


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_cli_config(args)
    except ConfigError as e:
        logger.error(f"配置加载失败: {e}")
        print(f"配置错误: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    text = args.hex if args.hex is not None else sys.stdin.read()
    try:
        data = parse_hex(text)
    except ValueError as e:
        print(f"十六进制格式无效: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    feedback = TruncationFlag()
    unknown_payload = None
    try:
        if args.protocol == "frame":
            packet = default_dispatcher(config).decode_chain(data, feedback)
            layers = packet.layers
            unknown_payload = packet.unknown_payload
        else:
            codec = AuthCodec(config) if args.protocol == "auth" else ConfigCodec(config)
            layers = (codec.decode_layer(data, feedback),)
    except ProtocolError as e:
        logger.debug(f"解码失败 (kind={e.kind.name}, truncated={feedback.truncated})")
        print(f"解码失败: {e} ({e.kind.description})", file=sys.stderr)
        return EXIT_DECODE_ERROR

    for line in format_layers(layers):
        print(line)
    if unknown_payload is not None:
        print(f"[?] 未知的下一层协议: {unknown_payload.hex()}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
