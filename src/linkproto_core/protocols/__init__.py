# src/linkproto_core/protocols/__init__.py
"""
链路控制协议层 (Protocol Layer)

本包负责协议数据包的纯粹编码 (Encode) 与解码 (Decode)。

- 不包含任何 socket 操作或文件 I/O。
- 不包含任何会话状态 (Session State)。
- 不依赖于 dispatch 或 main 层。
"""

from . import constants
from .addr_config import ConfigCodec, ConfigRecord, OfferBody
from .auth import AuthCodec, AuthRecord, ValueBody
from .base import BaseCodec, DecodedLayer, MessageBody
from .constants import AddrConfigCode, AuthCode
from .secure_frame import FrameRecord, SecureFrameCodec

# 公共 API
__all__ = [
    "constants",
    "AuthCode",
    "AddrConfigCode",
    "BaseCodec",
    "DecodedLayer",
    "MessageBody",
    "AuthCodec",
    "AuthRecord",
    "ValueBody",
    "ConfigCodec",
    "ConfigRecord",
    "OfferBody",
    "SecureFrameCodec",
    "FrameRecord",
]
