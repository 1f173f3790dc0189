# src/linkproto_core/protocols/addr_config.py
"""
Config 协议编解码器 (地址/子网协商帧)

报文结构 (大端序):
    Code(1) + Length(2) + Body

    Offer:           Address(4) + SubnetMask(4)
    Success/Failure: Message(剩余全部)

子网掩码按原始 4 字节读取，不校验是否为连续前缀。
"""

import ipaddress
import logging
import struct
from dataclasses import dataclass
from ipaddress import IPv4Address

from ..exceptions import (
    FieldConflictError,
    FieldRangeError,
    InvalidCodeError,
    LengthMismatchError,
)
from ..feedback import DecodeFeedback
from .base import BaseCodec, Buffer, DecodedLayer, MessageBody
from .constants import (
    ADDR_CONFIG_MESSAGE_CODES,
    ADDR_CONFIG_OFFER_CODES,
    MAX_U16,
    AddrConfigCode,
    AddrConfigConst,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OfferBody:
    """Offer 报文体：地址与子网掩码。

    构造时接受 IPv4Address、点分十进制字符串或 4 字节 packed 形式。

    Raises:
        FieldRangeError: 地址或掩码无法表示为 4 字节 IPv4 地址。
    """

    address: IPv4Address
    subnet_mask: IPv4Address

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", _to_ipv4("address", self.address))
        object.__setattr__(self, "subnet_mask", _to_ipv4("subnet_mask", self.subnet_mask))


def _to_ipv4(field_name: str, raw: IPv4Address | str | bytes | int) -> IPv4Address:
    try:
        return ipaddress.IPv4Address(raw)
    except ValueError as e:
        raise FieldRangeError(
            f"{field_name} 不是合法的 4 字节 IPv4 地址: {raw!r}",
            field_name,
            raw,
            AddrConfigConst.ADDRESS_LEN,
            "Config",
        ) from e


AddrConfigBody = OfferBody | MessageBody


@dataclass(frozen=True)
class ConfigRecord:
    """Config 报文记录。

    Attributes:
        code: 报文类型 (AddrConfigCode)。
        declared_length: 头部声明的整包长度 (16 位)。
        body: OfferBody (Offer) 或 MessageBody (Success/Failure)。
    """

    code: int
    declared_length: int
    body: AddrConfigBody

    @classmethod
    def offer(
        cls,
        address: IPv4Address | str | bytes,
        subnet_mask: IPv4Address | str | bytes,
        declared_length: int = 0,
    ) -> "ConfigRecord":
        return cls(
            AddrConfigCode.OFFER, declared_length, OfferBody(address, subnet_mask)
        )

    @classmethod
    def with_message(
        cls, code: int, message: bytes = b"", declared_length: int = 0
    ) -> "ConfigRecord":
        return cls(code, declared_length, MessageBody(message))

    @property
    def address(self) -> IPv4Address | None:
        return self.body.address if isinstance(self.body, OfferBody) else None

    @property
    def subnet_mask(self) -> IPv4Address | None:
        return self.body.subnet_mask if isinstance(self.body, OfferBody) else None

    @property
    def message(self) -> bytes:
        return self.body.message if isinstance(self.body, MessageBody) else b""


class ConfigCodec(BaseCodec):
    """Config 协议编解码器。"""

    protocol_name = "Config"
    record_type = ConfigRecord

    def decode_layer(
        self, buffer: Buffer, feedback: DecodeFeedback | None = None
    ) -> DecodedLayer:
        """解码 Config 报文。

        Raises:
            TruncatedError: 不足 3 字节头部、短于声明长度，或 Offer 不足 11 字节。
            InvalidCodeError: 未知的 Code。
            LengthMismatchError: 限定模式下声明长度不足以容纳固定字段。
        """
        view = self._view(buffer)
        size = len(view)

        if size < AddrConfigConst.HEADER_LEN:
            raise self._truncated(
                feedback, f"Config 长度 {size} 过短", AddrConfigConst.HEADER_LEN, size
            )

        code, declared_length = struct.unpack_from(AddrConfigConst.HEADER_FORMAT, view)
        if size < declared_length:
            raise self._truncated(
                feedback,
                f"Config 长度 {size} 过短，期望 {declared_length}",
                declared_length,
                size,
            )

        limit = declared_length if self.config.bound_to_declared_length else size

        body: AddrConfigBody
        if code in ADDR_CONFIG_OFFER_CODES:
            if size < AddrConfigConst.MASK_END:
                raise self._truncated(
                    feedback,
                    f"Offer 长度 {size} 过短，缺少地址/掩码字段",
                    AddrConfigConst.MASK_END,
                    size,
                )
            if limit < AddrConfigConst.MASK_END:
                raise LengthMismatchError(
                    f"声明长度 {declared_length} 不足以容纳地址与掩码",
                    declared_length,
                    AddrConfigConst.MASK_END,
                    self.protocol_name,
                )
            body = OfferBody(
                address=bytes(
                    view[AddrConfigConst.ADDRESS_START : AddrConfigConst.ADDRESS_END]
                ),
                subnet_mask=bytes(
                    view[AddrConfigConst.MASK_START : AddrConfigConst.MASK_END]
                ),
            )
        elif code in ADDR_CONFIG_MESSAGE_CODES:
            if limit < AddrConfigConst.MESSAGE_OFFSET:
                raise LengthMismatchError(
                    f"声明长度 {declared_length} 小于头部长度",
                    declared_length,
                    AddrConfigConst.MESSAGE_OFFSET,
                    self.protocol_name,
                )
            body = MessageBody(bytes(view[AddrConfigConst.MESSAGE_OFFSET : limit]))
        else:
            logger.debug(f"Config 未知 Code: {code}")
            raise InvalidCodeError(f"无效的 Config Code {code}", code, self.protocol_name)

        record = ConfigRecord(AddrConfigCode(code), declared_length, body)
        return self._split(view, record, declared_length)

    def _resolve_body(self, record: ConfigRecord) -> AddrConfigBody:
        """返回与 Code 形状一致的报文体。

        Offer 携带空 Message 时按全零地址/掩码编码。OfferBody 的地址与
        掩码总是存在，因此 Success/Failure 携带 OfferBody 一律视为冲突。
        """
        body = record.body
        if record.code in ADDR_CONFIG_OFFER_CODES:
            if isinstance(body, OfferBody):
                return body
            if body.message:
                raise FieldConflictError(
                    f"Code 为 {record.code} 的报文不能包含 Message 字段",
                    record.code,
                    self.protocol_name,
                )
            return OfferBody(IPv4Address(0), IPv4Address(0))
        if record.code in ADDR_CONFIG_MESSAGE_CODES:
            if isinstance(body, OfferBody):
                raise FieldConflictError(
                    f"Code 为 {record.code} 的报文不能包含 Address 和 SubnetMask 字段",
                    record.code,
                    self.protocol_name,
                )
            return body
        raise InvalidCodeError(
            f"无效的 Config Code {record.code}", record.code, self.protocol_name
        )

    @staticmethod
    def _body_size(body: AddrConfigBody) -> int:
        if isinstance(body, OfferBody):
            return AddrConfigConst.HEADER_LEN + AddrConfigConst.OFFER_BODY_LEN
        return AddrConfigConst.MESSAGE_OFFSET + len(body.message)

    def encoded_size(self, record: ConfigRecord) -> int:
        """计算编码长度并校验 Code 与报文体是否一致。"""
        return self._body_size(self._resolve_body(record))

    def encode(self, record: ConfigRecord, fix_lengths: bool | None = None) -> bytes:
        """将 Config 记录编码为字节序列。

        Raises:
            FieldConflictError: 另一组字段非空。
            InvalidCodeError: 未知的 Code。
            FieldRangeError: 声明长度超出 16 位。
        """
        body = self._resolve_body(record)
        size = self._body_size(body)
        declared_length = size if self._fix_lengths(fix_lengths) else record.declared_length
        self._check_range("declared_length", declared_length, MAX_U16)

        pkt = bytearray(size)
        struct.pack_into(AddrConfigConst.HEADER_FORMAT, pkt, 0, record.code, declared_length)

        if isinstance(body, OfferBody):
            pkt[AddrConfigConst.ADDRESS_START : AddrConfigConst.ADDRESS_END] = (
                body.address.packed
            )
            pkt[AddrConfigConst.MASK_START : AddrConfigConst.MASK_END] = (
                body.subnet_mask.packed
            )
        else:
            pkt[AddrConfigConst.MESSAGE_OFFSET :] = body.message

        return bytes(pkt)
