# src/linkproto_core/__init__.py
"""
linkproto-core v1.0.0
点对点会话建立阶段链路控制协议 (Auth / Config / SecureFrame) 的二进制编解码库。
"""

# 暴露配置
from .config import (
    CodecConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露分发器
from .dispatch import DecodedPacket, LayerDispatcher, default_dispatcher

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    ConfigError,
    ErrorKind,
    FieldConflictError,
    FieldRangeError,
    InvalidCodeError,
    LengthMismatchError,
    LinkProtoError,
    ProtocolError,
    TruncatedError,
)
from .feedback import DecodeFeedback, NilDecodeFeedback, TruncationFlag

# 暴露编解码器
from .protocols import (
    AddrConfigCode,
    AuthCode,
    AuthCodec,
    AuthRecord,
    ConfigCodec,
    ConfigRecord,
    DecodedLayer,
    FrameRecord,
    MessageBody,
    OfferBody,
    SecureFrameCodec,
    ValueBody,
)

__version__ = "1.0.0"

__all__ = [
    "CodecConfig",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "LayerDispatcher",
    "DecodedPacket",
    "default_dispatcher",
    "LinkProtoError",
    "ConfigError",
    "ErrorKind",
    "ProtocolError",
    "TruncatedError",
    "InvalidCodeError",
    "FieldConflictError",
    "FieldRangeError",
    "LengthMismatchError",
    "DecodeFeedback",
    "NilDecodeFeedback",
    "TruncationFlag",
    "AuthCode",
    "AddrConfigCode",
    "AuthCodec",
    "AuthRecord",
    "ValueBody",
    "ConfigCodec",
    "ConfigRecord",
    "OfferBody",
    "MessageBody",
    "SecureFrameCodec",
    "FrameRecord",
    "DecodedLayer",
]
