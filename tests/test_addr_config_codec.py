# tests/test_addr_config_codec.py
"""
测试 Config (地址/子网协商) 编解码器。
"""

from ipaddress import IPv4Address

import pytest

from linkproto_core.exceptions import (
    FieldConflictError,
    FieldRangeError,
    InvalidCodeError,
    LengthMismatchError,
    TruncatedError,
)
from linkproto_core.protocols import (
    AddrConfigCode,
    ConfigCodec,
    ConfigRecord,
    MessageBody,
    OfferBody,
)

# =========================================================================
# Decode
# =========================================================================


def test_decode_offer_example(config_offer_bytes):
    """验证文档中的 Offer 示例报文"""
    record = ConfigCodec().decode(config_offer_bytes)

    assert record.code == AddrConfigCode.OFFER
    assert record.declared_length == 11
    assert record.address == IPv4Address("192.168.1.1")
    assert record.subnet_mask == IPv4Address("255.255.255.0")
    assert record.message == b""


def test_decode_offer_accepts_non_contiguous_mask():
    """掩码按原始字节读取，不校验是否为连续前缀"""
    data = bytes.fromhex("01000b0a000001ff00ff00")
    record = ConfigCodec().decode(data)
    assert record.subnet_mask == IPv4Address("255.0.255.0")


def test_decode_success_message():
    data = bytes([AddrConfigCode.SUCCESS, 0x00, 0x05]) + b"ok"
    record = ConfigCodec().decode(data)

    assert record.code == AddrConfigCode.SUCCESS
    assert isinstance(record.body, MessageBody)
    assert record.message == b"ok"
    assert record.address is None and record.subnet_mask is None


def test_decode_layer_payload_after_declared_length(config_offer_bytes):
    data = config_offer_bytes + b"\x99\x98"
    layer = ConfigCodec().decode_layer(data)

    assert bytes(layer.contents) == config_offer_bytes
    assert bytes(layer.payload) == b"\x99\x98"


def test_decode_is_idempotent(config_offer_bytes):
    codec = ConfigCodec()
    assert codec.decode(config_offer_bytes) == codec.decode(config_offer_bytes)

    failure = b"\x03\x00\x07busy"
    assert codec.decode(failure) == codec.decode(failure)


def test_decode_failure_message_runs_to_buffer_end():
    data = bytes([AddrConfigCode.FAILURE, 0x00, 0x03]) + b"no pool"
    record = ConfigCodec().decode(data)
    assert record.message == b"no pool"


# =========================================================================
# 截断 / 无效 Code
# =========================================================================


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"", 3),
        (b"\x01\x00", 3),
        (b"\x02\x00\x10ok", 16),
        # 声明长度 3 已满足，但 Offer 需要 11 字节
        (b"\x01\x00\x03\xc0\xa8", 11),
    ],
)
def test_truncated_inputs(data, expected, feedback):
    with pytest.raises(TruncatedError) as exc_info:
        ConfigCodec().decode(data, feedback)

    assert exc_info.value.expected == expected
    assert exc_info.value.actual == len(data)
    assert feedback.calls == 1


def test_decode_invalid_code(feedback):
    with pytest.raises(InvalidCodeError) as exc_info:
        ConfigCodec().decode(bytes([99, 0x00, 0x03]), feedback)

    assert exc_info.value.code == 99
    assert feedback.truncated is False


def test_encode_invalid_code():
    with pytest.raises(InvalidCodeError):
        ConfigCodec().encode(ConfigRecord(99, 0, MessageBody(b"")))


# =========================================================================
# Encode
# =========================================================================


def test_encode_offer_fix_lengths():
    record = ConfigRecord.offer("10.0.0.2", "255.255.0.0")
    pkt = ConfigCodec().encode(record, fix_lengths=True)

    assert pkt == bytes.fromhex("01000b0a000002ffff0000")


def test_encode_offer_accepts_packed_addresses():
    record = ConfigRecord.offer(b"\xc0\xa8\x01\x01", b"\xff\xff\xff\x00", declared_length=11)
    assert ConfigCodec().encode(record) == bytes.fromhex("01000bc0a80101ffffff00")


def test_encode_message_verbatim_length():
    record = ConfigRecord.with_message(AddrConfigCode.FAILURE, b"busy", declared_length=1)
    assert ConfigCodec().encode(record) == b"\x03\x00\x01busy"


def test_encode_offer_with_message_body_is_field_conflict():
    record = ConfigRecord(AddrConfigCode.OFFER, 0, MessageBody(b"x"))
    with pytest.raises(FieldConflictError):
        ConfigCodec().encode(record)


def test_encode_success_with_offer_body_is_field_conflict():
    record = ConfigRecord(
        AddrConfigCode.SUCCESS, 0, OfferBody("1.2.3.4", "255.255.255.255")
    )
    with pytest.raises(FieldConflictError) as exc_info:
        ConfigCodec().encode(record)
    assert exc_info.value.code == AddrConfigCode.SUCCESS


def test_encode_offer_with_empty_message_body():
    """空 Message 不构成冲突，Offer 按全零地址/掩码编码"""
    record = ConfigRecord(AddrConfigCode.OFFER, 0, MessageBody(b""))
    codec = ConfigCodec()

    assert codec.encode(record, fix_lengths=True) == b"\x01\x00\x0b" + b"\x00" * 8
    assert codec.encoded_size(record) == 11


def test_encode_success_with_all_zero_offer_body_is_field_conflict():
    """OfferBody 的地址与掩码总是存在，即使全零也与 Success 冲突"""
    record = ConfigRecord(AddrConfigCode.SUCCESS, 0, OfferBody("0.0.0.0", "0.0.0.0"))
    with pytest.raises(FieldConflictError):
        ConfigCodec().encode(record, fix_lengths=True)


@pytest.mark.parametrize(
    "address, field_name",
    [
        (b"\xc0\xa8\x01", "address"),
        (b"\xc0\xa8\x01\x01\x00", "address"),
        ("999.0.0.1", "address"),
    ],
)
def test_offer_with_invalid_address_is_field_range(address, field_name):
    with pytest.raises(FieldRangeError) as exc_info:
        ConfigRecord.offer(address, "255.255.255.0")

    assert exc_info.value.field_name == field_name
    assert exc_info.value.value == address
    assert exc_info.value.limit == 4
    assert "[Config]" in str(exc_info.value)


def test_offer_with_invalid_mask_is_field_range():
    with pytest.raises(FieldRangeError) as exc_info:
        OfferBody("10.0.0.1", b"\xff\xff")
    assert exc_info.value.field_name == "subnet_mask"


def test_encode_declared_length_out_of_range():
    record = ConfigRecord.with_message(AddrConfigCode.SUCCESS, b"", declared_length=70000)
    with pytest.raises(FieldRangeError):
        ConfigCodec().encode(record)


# =========================================================================
# Round-trip
# =========================================================================


@pytest.mark.parametrize(
    "record",
    [
        ConfigRecord.offer("192.168.1.1", "255.255.255.0"),
        ConfigRecord.offer("0.0.0.0", "0.0.0.0"),
        ConfigRecord.with_message(AddrConfigCode.SUCCESS),
        ConfigRecord.with_message(AddrConfigCode.FAILURE, b"address in use"),
    ],
)
def test_round_trip_with_fixed_lengths(record):
    codec = ConfigCodec()
    decoded = codec.decode(codec.encode(record, fix_lengths=True))

    assert decoded == codec.with_fixed_length(record)
    # 恰好一组字段被填充
    if decoded.code == AddrConfigCode.OFFER:
        assert decoded.address is not None and decoded.message == b""
    else:
        assert decoded.address is None and decoded.subnet_mask is None


# =========================================================================
# 限定模式
# =========================================================================


def test_bounded_message_stops_at_declared_length(bounded_config):
    data = bytes([AddrConfigCode.SUCCESS, 0x00, 0x05]) + b"ok" + b"TRAILER"
    record = ConfigCodec(bounded_config).decode(data)
    assert record.message == b"ok"


def test_bounded_offer_with_short_declared_length(bounded_config, feedback):
    data = bytes.fromhex("010005c0a80101ffffff00")
    with pytest.raises(LengthMismatchError):
        ConfigCodec(bounded_config).decode(data, feedback)
    assert feedback.truncated is False
