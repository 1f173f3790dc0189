# src/linkproto_core/protocols/secure_frame.py
"""
SecureFrame 协议编解码器 (单字节子协议选择子)

报文结构:
    Selector(1) + Remainder(剩余全部)

任何字节值都是合法的选择子，选择子到下一层编解码器的映射由
调用方 (LayerDispatcher) 负责。
"""

from dataclasses import dataclass

from ..feedback import DecodeFeedback
from .base import BaseCodec, Buffer, DecodedLayer
from .constants import MAX_U8, FrameConst


@dataclass(frozen=True)
class FrameRecord:
    """SecureFrame 记录。

    Attributes:
        selector: 标识内层子协议的单字节选择子。
        remainder: 选择子之后的字节，是原始输入的只读视图 (不复制)。
            encode 时忽略该字段。
    """

    selector: int
    remainder: memoryview | bytes = b""


class SecureFrameCodec(BaseCodec):
    """SecureFrame 编解码器。"""

    protocol_name = "SecureFrame"
    record_type = FrameRecord

    def decode_layer(
        self, buffer: Buffer, feedback: DecodeFeedback | None = None
    ) -> DecodedLayer:
        view = self._view(buffer)
        if len(view) < FrameConst.HEADER_LEN:
            raise self._truncated(
                feedback, "SecureFrame 头部长度不足", FrameConst.HEADER_LEN, len(view)
            )

        remainder = view[FrameConst.HEADER_LEN :]
        record = FrameRecord(view[FrameConst.SELECTOR_OFFSET], remainder)
        return self._split(view, record, FrameConst.HEADER_LEN)

    def encoded_size(self, record: FrameRecord) -> int:
        return FrameConst.HEADER_LEN

    def with_fixed_length(self, record: FrameRecord) -> FrameRecord:
        # 没有长度字段
        return record

    def encode(self, record: FrameRecord, fix_lengths: bool | None = None) -> bytes:
        """编码为恰好 1 个字节 (选择子)。fix_lengths 对本协议无意义。"""
        self._check_range("selector", record.selector, MAX_U8)
        return bytes([record.selector])
