"""
链路控制协议编解码基类 (Base Codec)

定义所有编解码器必须实现的抽象接口 (decode_layer / encode)，
以及各协议共用的报文体类型和解码结果容器。
"""

import abc
import logging
from dataclasses import dataclass, replace
from typing import Any

from ..config import CodecConfig
from ..exceptions import FieldRangeError, TruncatedError
from ..feedback import NIL_FEEDBACK, DecodeFeedback

# decode 接受的输入类型 (只读使用)
Buffer = bytes | bytearray | memoryview


@dataclass(frozen=True)
class MessageBody:
    """Success/Failure 类报文的报文体：一段自由格式的字节序列。"""

    message: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "message", bytes(self.message))


@dataclass(frozen=True)
class DecodedLayer:
    """一次成功解码的结果。

    Attributes:
        record: 解码得到的记录对象。
        contents: 本层消费的 "头部 + 报文体" 切片 (Auth/Config 以
            declared_length 为界)。
        payload: 本层之后的尾部载荷，交给下一层协议继续解析。
    """

    record: Any
    contents: memoryview
    payload: memoryview


class BaseCodec(abc.ABC):
    """编解码器抽象基类。

    编解码器只持有不可变的配置，decode/encode 均为纯函数，
    可以在多个线程中对互不相交的缓冲区并发调用。
    """

    protocol_name: str = ""
    record_type: type = object

    def __init__(self, config: CodecConfig | None = None) -> None:
        """初始化编解码器。

        Args:
            config: 编解码配置，缺省时使用默认配置。
        """
        self.config = config or CodecConfig()
        self.logger = logging.getLogger(self.__class__.__name__)

    def decode(self, buffer: Buffer, feedback: DecodeFeedback | None = None) -> Any:
        """将原始字节解码为记录对象。

        Args:
            buffer: 抓取到的原始字节。
            feedback: 截断反馈钩子。

        Returns:
            解码得到的记录对象。

        Raises:
            ProtocolError: 输入被截断或判别码无效。
        """
        return self.decode_layer(buffer, feedback).record

    @abc.abstractmethod
    def decode_layer(
        self, buffer: Buffer, feedback: DecodeFeedback | None = None
    ) -> DecodedLayer:
        """[Abstract] 解码并返回记录以及本层消费/剩余的切片。"""
        raise NotImplementedError

    @abc.abstractmethod
    def encode(self, record: Any, fix_lengths: bool | None = None) -> bytes:
        """[Abstract] 将记录编码为线上字节序列。

        Args:
            record: 待编码的记录。
            fix_lengths: 是否用计算出的长度覆盖记录中的声明长度。
                None 表示使用配置中的默认值。

        Returns:
            bytes: 新分配的、长度恰好为计算值的字节序列。
        """
        raise NotImplementedError

    @abc.abstractmethod
    def encoded_size(self, record: Any) -> int:
        """[Abstract] 计算记录编码后的字节数。"""
        raise NotImplementedError

    def with_fixed_length(self, record: Any) -> Any:
        """返回 declared_length 被替换为实际编码长度的新记录。"""
        return replace(record, declared_length=self.encoded_size(record))

    # ---------------------------------------------------------------------
    # 内部辅助
    # ---------------------------------------------------------------------

    @staticmethod
    def _view(buffer: Buffer) -> memoryview:
        """获取输入的只读字节视图，不复制数据。"""
        view = memoryview(buffer)
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        return view.toreadonly()

    def _truncated(
        self,
        feedback: DecodeFeedback | None,
        message: str,
        expected: int,
        actual: int,
    ) -> TruncatedError:
        """通知反馈钩子并构造截断异常 (调用方负责 raise)。"""
        (feedback or NIL_FEEDBACK).set_truncated()
        self.logger.debug(f"输入被截断: 期望 {expected} 字节, 实际 {actual} 字节")
        return TruncatedError(message, expected, actual, self.protocol_name)

    def _check_range(self, field_name: str, value: int, limit: int) -> None:
        """确保整数字段可以放入其线上宽度。"""
        if not 0 <= value <= limit:
            raise FieldRangeError(
                f"{field_name}={value} 超出范围 [0, {limit}]",
                field_name,
                value,
                limit,
                self.protocol_name,
            )

    def _fix_lengths(self, fix_lengths: bool | None) -> bool:
        return self.config.fix_lengths if fix_lengths is None else fix_lengths

    def _split(self, view: memoryview, record: Any, boundary: int) -> DecodedLayer:
        """按边界切分为 contents / payload，并记录调试日志。"""
        if self.config.log_payloads:
            self.logger.debug(f"解码成功: {record!r} raw={view.hex()}")
        else:
            self.logger.debug(f"解码成功: {record!r}")
        return DecodedLayer(record=record, contents=view[:boundary], payload=view[boundary:])
