# src/linkproto_core/protocols/constants.py
"""
链路控制协议层 - 常量定义

本模块定义了三种协议的判别码、头部长度与偏移量。
采用命名空间 (Class Namespace) 组织，不使用扁平全局变量。
所有多字节整数均为大端序 (Big Endian)。
"""

from enum import IntEnum

# =========================================================================
# 1. 判别码 (Codes)
# =========================================================================


class AuthCode(IntEnum):
    """Auth (CHAP 风格) 报文的 Code 字段"""

    CHALLENGE = 1
    RESPONSE = 2
    SUCCESS = 3
    FAILURE = 4


class AddrConfigCode(IntEnum):
    """Config (IPCP 风格) 报文的 Code 字段"""

    OFFER = 1
    SUCCESS = 2
    FAILURE = 3


# 携带 value/name 的 Code
AUTH_VALUE_CODES = frozenset({AuthCode.CHALLENGE, AuthCode.RESPONSE})
# 携带 message 的 Code
AUTH_MESSAGE_CODES = frozenset({AuthCode.SUCCESS, AuthCode.FAILURE})

ADDR_CONFIG_OFFER_CODES = frozenset({AddrConfigCode.OFFER})
ADDR_CONFIG_MESSAGE_CODES = frozenset({AddrConfigCode.SUCCESS, AddrConfigCode.FAILURE})


# =========================================================================
# 2. Auth 报文布局
# =========================================================================


class AuthConst:
    # Header: Code(1) + Identifier(1) + Length(2)
    HEADER_LEN = 4
    LENGTH_OFFSET = 2
    HEADER_FORMAT = "!BBH"

    # Challenge/Response: ValueSize(1) + Value + Name
    VALUE_SIZE_OFFSET = 4
    VALUE_OFFSET = 5

    # Success/Failure: Message
    MESSAGE_OFFSET = 4

    MAX_VALUE_SIZE = 0xFF


# =========================================================================
# 3. Config 报文布局
# =========================================================================


class AddrConfigConst:
    # Header: Code(1) + Length(2)
    HEADER_LEN = 3
    LENGTH_OFFSET = 1
    HEADER_FORMAT = "!BH"

    # Offer: Address(4) + SubnetMask(4)
    ADDRESS_LEN = 4
    ADDRESS_START = 3
    ADDRESS_END = 7
    MASK_START = 7
    MASK_END = 11
    OFFER_BODY_LEN = 8

    # Success/Failure: Message
    MESSAGE_OFFSET = 3


# =========================================================================
# 4. SecureFrame 报文布局
# =========================================================================


class FrameConst:
    # Header: Selector(1)
    HEADER_LEN = 1
    SELECTOR_OFFSET = 0


# =========================================================================
# 5. 通用取值范围
# =========================================================================

MAX_U8 = 0xFF
MAX_U16 = 0xFFFF
