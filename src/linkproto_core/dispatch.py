# File: src/linkproto_core/dispatch.py
"""
链路控制协议分发器 (Layer Dispatcher)

职责：
1. 持有调用方显式构造的 "选择子 -> 编解码器" 映射 (不使用全局注册表)。
2. 解码链：SecureFrame -> 选择子对应的内层协议。
3. 编码链：选择子字节 + 内层报文。

分发器本身不保存任何会话状态，可被多个线程共享。
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .config import CodecConfig
from .exceptions import ConfigError, FieldConflictError, InvalidCodeError
from .feedback import DecodeFeedback
from .protocols.addr_config import ConfigCodec
from .protocols.auth import AuthCodec
from .protocols.base import BaseCodec, Buffer, DecodedLayer
from .protocols.secure_frame import FrameRecord, SecureFrameCodec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedPacket:
    """一次分发解码的结果。

    Attributes:
        layers: 按顺序解码出的各层 (首层总是 SecureFrame)。
        unknown_payload: 选择子未映射时无法继续解析的剩余字节，否则为 None。
    """

    layers: tuple[DecodedLayer, ...]
    unknown_payload: memoryview | None = None

    @property
    def frame(self) -> FrameRecord:
        return self.layers[0].record

    @property
    def inner(self) -> Any | None:
        """内层协议记录，选择子未映射时为 None。"""
        return self.layers[1].record if len(self.layers) > 1 else None


class LayerDispatcher:
    """按 SecureFrame 选择子分发到内层编解码器。"""

    def __init__(
        self,
        codecs: Mapping[int, BaseCodec],
        frame_codec: SecureFrameCodec | None = None,
    ) -> None:
        """初始化分发器。

        Args:
            codecs: 选择子到编解码器的映射，由调用方构造。
            frame_codec: 外层 SecureFrame 编解码器，缺省时新建一个。

        Raises:
            ConfigError: 选择子超出单字节范围。
        """
        for selector in codecs:
            if not 0 <= selector <= 0xFF:
                raise ConfigError(f"选择子超出范围: {selector}")
        self._codecs: dict[int, BaseCodec] = dict(codecs)
        self.frame_codec = frame_codec or SecureFrameCodec()

    def codec_for(self, selector: int) -> BaseCodec | None:
        """查找选择子对应的编解码器，未映射时返回 None。"""
        return self._codecs.get(selector)

    def decode_chain(
        self, buffer: Buffer, feedback: DecodeFeedback | None = None
    ) -> DecodedPacket:
        """解码 SecureFrame 及其内层协议。

        选择子未映射不视为错误：剩余字节通过 unknown_payload 返回。
        内层编解码器的异常原样向上传播。

        Raises:
            ProtocolError: 任意一层解码失败。
        """
        frame_layer = self.frame_codec.decode_layer(buffer, feedback)
        selector = frame_layer.record.selector

        codec = self.codec_for(selector)
        if codec is None:
            logger.debug(f"选择子 {hex(selector)} 未映射，停止解析")
            return DecodedPacket(
                layers=(frame_layer,), unknown_payload=frame_layer.payload
            )

        inner_layer = codec.decode_layer(frame_layer.payload, feedback)
        return DecodedPacket(layers=(frame_layer, inner_layer))

    def encode_chain(
        self, frame: FrameRecord, inner: Any, fix_lengths: bool | None = None
    ) -> bytes:
        """编码选择子与内层报文。

        Raises:
            InvalidCodeError: 选择子未映射。
            FieldConflictError: 内层记录类型与选择子映射的编解码器不符。
        """
        codec = self.codec_for(frame.selector)
        if codec is None:
            raise InvalidCodeError(
                f"选择子 {hex(frame.selector)} 未映射到任何编解码器",
                frame.selector,
                self.frame_codec.protocol_name,
            )
        if not isinstance(inner, codec.record_type):
            raise FieldConflictError(
                f"选择子 {hex(frame.selector)} 期望 {codec.record_type.__name__}，"
                f"实际为 {type(inner).__name__}",
                frame.selector,
                self.frame_codec.protocol_name,
            )
        return self.frame_codec.encode(frame) + codec.encode(inner, fix_lengths)


def default_dispatcher(config: CodecConfig | None = None) -> LayerDispatcher:
    """按配置中的选择子构造 Auth/Config 分发器。"""
    config = config or CodecConfig()
    return LayerDispatcher(
        {
            config.auth_selector: AuthCodec(config),
            config.addr_config_selector: ConfigCodec(config),
        },
        frame_codec=SecureFrameCodec(config),
    )
