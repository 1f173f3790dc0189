# File: src/linkproto_core/exceptions.py
"""
链路控制协议编解码库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如抓包框架/CLI）能进行精细的错误处理。
所有编解码错误对单次 decode/encode 调用都是终结性的，库内部不做任何重试。
"""

from enum import IntEnum


class LinkProtoError(Exception):
    """linkproto-core 所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 linkproto-core 抛出的已知错误。
    """

    pass


class ConfigError(LinkProtoError):
    """配置加载或校验失败。

    触发场景:
    1. 字段格式错误 (如选择子不是 0-255 的整数)。
    2. 找不到配置文件或 Profile。
    """

    pass


class ErrorKind(IntEnum):
    """编解码错误类别。"""

    TRUNCATED = 0x01  # 输入长度不足 (需要重新抓取更多数据)
    INVALID_CODE = 0x02  # 未知的判别码 (对端不合规或分发错误)
    FIELD_CONFLICT = 0x03  # 字段组与 Code 不匹配 (调用方编程错误)
    FIELD_RANGE = 0x04  # 整数字段超出线上宽度
    LENGTH_MISMATCH = 0x05  # 声明长度不足以容纳固定字段 (仅限定界模式)

    @property
    def description(self) -> str:
        """获取错误类别对应的人类可读中文描述。

        Returns:
            str: 对应的中文错误提示。
        """
        _DESC_MAP = {
            0x01: "数据被截断 (输入长度不足)",
            0x02: "无效的判别码",
            0x03: "字段与 Code 冲突",
            0x04: "字段超出取值范围",
            0x05: "声明长度与内容不符",
        }
        return _DESC_MAP.get(self.value, f"未知错误类别 (Kind: {hex(self.value)})")


class ProtocolError(LinkProtoError):
    """协议编解码错误 (逻辑级别)。

    所有编解码异常的基类。子类通过类属性 `kind` 标识错误类别。

    Attributes:
        kind: 错误类别。
        protocol: 出错的协议名 (如 'Auth', 'Config', 'SecureFrame')。
    """

    kind: ErrorKind

    def __init__(self, message: str, protocol: str | None = None) -> None:
        if protocol:
            message = f"[{protocol}] {message}"
        super().__init__(message)
        self.protocol = protocol


class TruncatedError(ProtocolError):
    """输入缓冲区短于已读取的头部字段所要求的长度。

    只能通过重新抓取更多数据来恢复，调用方可借助 expected/actual 记录日志。
    """

    kind = ErrorKind.TRUNCATED

    def __init__(
        self,
        message: str,
        expected: int,
        actual: int,
        protocol: str | None = None,
    ) -> None:
        super().__init__(message, protocol)
        self.expected = expected
        self.actual = actual


class InvalidCodeError(ProtocolError):
    """未识别的判别码 (decode 或 encode 时)。"""

    kind = ErrorKind.INVALID_CODE

    def __init__(self, message: str, code: int, protocol: str | None = None) -> None:
        super().__init__(message, protocol)
        self.code = code


class FieldConflictError(ProtocolError):
    """encode 时报文体与 Code 不一致 (调用方错误，快速失败)。"""

    kind = ErrorKind.FIELD_CONFLICT

    def __init__(self, message: str, code: int, protocol: str | None = None) -> None:
        super().__init__(message, protocol)
        self.code = code


class FieldRangeError(ProtocolError):
    """字段值无法放入其线上宽度 (如 identifier > 255，或地址不是 4 字节)。"""

    kind = ErrorKind.FIELD_RANGE

    def __init__(
        self,
        message: str,
        field_name: str,
        value: object,
        limit: int,
        protocol: str | None = None,
    ) -> None:
        super().__init__(message, protocol)
        self.field_name = field_name
        self.value = value
        self.limit = limit


class LengthMismatchError(ProtocolError):
    """声明长度小于当前 Code 固定字段所需的长度。

    仅在 bound_to_declared_length 模式下出现。这是格式错误而非截断，
    因此不会触发 DecodeFeedback。
    """

    kind = ErrorKind.LENGTH_MISMATCH

    def __init__(
        self,
        message: str,
        declared: int,
        required: int,
        protocol: str | None = None,
    ) -> None:
        super().__init__(message, protocol)
        self.declared = declared
        self.required = required
