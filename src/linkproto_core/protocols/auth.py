# src/linkproto_core/protocols/auth.py
"""
Auth 协议编解码器 (Challenge/Response 认证帧)

报文结构 (大端序):
    Code(1) + Identifier(1) + Length(2) + Body

    Challenge/Response: ValueSize(1) + Value(ValueSize) + Name(剩余全部)
    Success/Failure:    Message(剩余全部)

本模块只负责帧结构，不做任何挑战/应答的密码学计算。
"""

import logging
import struct
from dataclasses import dataclass

from ..exceptions import FieldConflictError, InvalidCodeError, LengthMismatchError
from ..feedback import DecodeFeedback
from .base import BaseCodec, Buffer, DecodedLayer, MessageBody
from .constants import (
    AUTH_MESSAGE_CODES,
    AUTH_VALUE_CODES,
    MAX_U8,
    MAX_U16,
    AuthCode,
    AuthConst,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValueBody:
    """Challenge/Response 报文体。

    Attributes:
        value: 挑战值或应答值 (不透明字节)。
        name: 名称字段，线上没有显式长度，一直延伸到报文末尾。
        value_size: ValueSize 字段，缺省为 len(value)。显式指定不一致的值
            可用于构造畸形报文。
    """

    value: bytes = b""
    name: bytes = b""
    value_size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", bytes(self.value))
        object.__setattr__(self, "name", bytes(self.name))
        if self.value_size is None:
            object.__setattr__(self, "value_size", len(self.value))


AuthBody = ValueBody | MessageBody


@dataclass(frozen=True)
class AuthRecord:
    """Auth 报文记录。

    字段组由 body 的类型决定：ValueBody 对应 Challenge/Response，
    MessageBody 对应 Success/Failure，两组字段不可能同时存在。

    Attributes:
        code: 报文类型 (AuthCode)。
        identifier: 关联字节，对端在应答中原样回显。
        declared_length: 头部声明的整包长度 (16 位)。
        body: 报文体。
    """

    code: int
    identifier: int
    declared_length: int
    body: AuthBody

    @classmethod
    def with_value(
        cls,
        code: int,
        identifier: int,
        value: bytes,
        name: bytes = b"",
        declared_length: int = 0,
    ) -> "AuthRecord":
        """构造 Challenge/Response 记录。"""
        return cls(code, identifier, declared_length, ValueBody(value, name))

    @classmethod
    def with_message(
        cls,
        code: int,
        identifier: int,
        message: bytes = b"",
        declared_length: int = 0,
    ) -> "AuthRecord":
        """构造 Success/Failure 记录。"""
        return cls(code, identifier, declared_length, MessageBody(message))

    @property
    def value_size(self) -> int:
        return self.body.value_size if isinstance(self.body, ValueBody) else 0

    @property
    def value(self) -> bytes:
        return self.body.value if isinstance(self.body, ValueBody) else b""

    @property
    def name(self) -> bytes:
        return self.body.name if isinstance(self.body, ValueBody) else b""

    @property
    def message(self) -> bytes:
        return self.body.message if isinstance(self.body, MessageBody) else b""


class AuthCodec(BaseCodec):
    """Auth 协议编解码器。"""

    protocol_name = "Auth"
    record_type = AuthRecord

    def decode_layer(
        self, buffer: Buffer, feedback: DecodeFeedback | None = None
    ) -> DecodedLayer:
        """解码 Auth 报文。

        校验顺序:
        1. 至少 4 字节头部。
        2. 缓冲区长度不小于声明长度。
        3. Challenge/Response: 至少 5 字节，且剩余字节足够容纳 Value。

        Args:
            buffer: 抓取到的原始字节。
            feedback: 截断反馈钩子，截断时在抛出异常前调用一次。

        Returns:
            DecodedLayer: contents 为 buffer[:declared_length]，
            payload 为其后的全部字节。

        Raises:
            TruncatedError: 输入长度不足。
            InvalidCodeError: 未知的 Code。
            LengthMismatchError: 限定模式下声明长度不足以容纳固定字段。
        """
        view = self._view(buffer)
        size = len(view)

        # 1. 头部
        if size < AuthConst.HEADER_LEN:
            raise self._truncated(
                feedback, f"Auth 长度 {size} 过短", AuthConst.HEADER_LEN, size
            )

        code, identifier, declared_length = struct.unpack_from(
            AuthConst.HEADER_FORMAT, view
        )

        # 2. 声明长度必须能被实际缓冲区满足
        if size < declared_length:
            raise self._truncated(
                feedback,
                f"Auth 长度 {size} 过短，期望 {declared_length}",
                declared_length,
                size,
            )

        # 尾部变长字段的终点
        limit = declared_length if self.config.bound_to_declared_length else size

        # 3. 按 Code 解析报文体
        body: AuthBody
        if code in AUTH_VALUE_CODES:
            if size < AuthConst.VALUE_OFFSET:
                raise self._truncated(
                    feedback,
                    f"Auth 长度 {size} 过短，缺少 ValueSize 字段",
                    AuthConst.VALUE_OFFSET,
                    size,
                )
            value_size = view[AuthConst.VALUE_SIZE_OFFSET]
            value_end = AuthConst.VALUE_OFFSET + value_size
            if size < value_end:
                raise self._truncated(
                    feedback,
                    f"Value 字段长度不足，期望 {value_size}",
                    value_end,
                    size,
                )
            if limit < value_end:
                raise LengthMismatchError(
                    f"声明长度 {declared_length} 不足以容纳 {value_size} 字节的 Value",
                    declared_length,
                    value_end,
                    self.protocol_name,
                )
            body = ValueBody(
                value=bytes(view[AuthConst.VALUE_OFFSET : value_end]),
                name=bytes(view[value_end:limit]),
                value_size=value_size,
            )
        elif code in AUTH_MESSAGE_CODES:
            if limit < AuthConst.MESSAGE_OFFSET:
                raise LengthMismatchError(
                    f"声明长度 {declared_length} 小于头部长度",
                    declared_length,
                    AuthConst.MESSAGE_OFFSET,
                    self.protocol_name,
                )
            body = MessageBody(bytes(view[AuthConst.MESSAGE_OFFSET : limit]))
        else:
            logger.debug(f"Auth 未知 Code: {code}")
            raise InvalidCodeError(f"无效的 Auth Code {code}", code, self.protocol_name)

        record = AuthRecord(AuthCode(code), identifier, declared_length, body)
        return self._split(view, record, declared_length)

    def _resolve_body(self, record: AuthRecord) -> AuthBody:
        """返回与 Code 形状一致的报文体。

        另一组字段全部为空时视为本组的空报文体，非空时报告冲突。

        Raises:
            FieldConflictError: 另一组字段非空。
            InvalidCodeError: 未知的 Code。
        """
        body = record.body
        if record.code in AUTH_VALUE_CODES:
            if isinstance(body, ValueBody):
                return body
            if body.message:
                raise FieldConflictError(
                    f"Code 为 {record.code} 的报文不能包含 Message 字段",
                    record.code,
                    self.protocol_name,
                )
            return ValueBody()
        if record.code in AUTH_MESSAGE_CODES:
            if isinstance(body, MessageBody):
                return body
            if body.value or body.name or body.value_size:
                raise FieldConflictError(
                    f"Code 为 {record.code} 的报文不能包含 Value 和 Name 字段",
                    record.code,
                    self.protocol_name,
                )
            return MessageBody()
        raise InvalidCodeError(
            f"无效的 Auth Code {record.code}", record.code, self.protocol_name
        )

    @staticmethod
    def _body_size(body: AuthBody) -> int:
        if isinstance(body, ValueBody):
            return AuthConst.VALUE_OFFSET + len(body.value) + len(body.name)
        return AuthConst.MESSAGE_OFFSET + len(body.message)

    def encoded_size(self, record: AuthRecord) -> int:
        """计算记录编码后的字节数，同时校验 Code 与报文体是否一致。

        Raises:
            FieldConflictError: 另一组字段非空。
            InvalidCodeError: 未知的 Code。
        """
        return self._body_size(self._resolve_body(record))

    def encode(self, record: AuthRecord, fix_lengths: bool | None = None) -> bytes:
        """将 Auth 记录编码为字节序列。

        Args:
            record: 待编码的记录。
            fix_lengths: 为 True 时写入计算出的长度，否则原样写入
                record.declared_length (允许构造长度畸形的测试报文)。

        Returns:
            bytes: 编码结果。

        Raises:
            FieldConflictError: 另一组字段非空。
            InvalidCodeError: 未知的 Code。
            FieldRangeError: 整数字段超出线上宽度。
        """
        body = self._resolve_body(record)
        size = self._body_size(body)
        declared_length = size if self._fix_lengths(fix_lengths) else record.declared_length

        self._check_range("identifier", record.identifier, MAX_U8)
        self._check_range("declared_length", declared_length, MAX_U16)

        pkt = bytearray(size)
        struct.pack_into(
            AuthConst.HEADER_FORMAT, pkt, 0, record.code, record.identifier, declared_length
        )

        if isinstance(body, ValueBody):
            self._check_range("value_size", body.value_size, AuthConst.MAX_VALUE_SIZE)
            value_end = AuthConst.VALUE_OFFSET + len(body.value)
            pkt[AuthConst.VALUE_SIZE_OFFSET] = body.value_size
            pkt[AuthConst.VALUE_OFFSET : value_end] = body.value
            pkt[value_end:] = body.name
        else:
            pkt[AuthConst.MESSAGE_OFFSET :] = body.message

        return bytes(pkt)
