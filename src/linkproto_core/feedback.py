# File: src/linkproto_core/feedback.py
"""
链路控制协议编解码库 - 解码反馈 (Decode Feedback)

外部抓包框架通过反馈钩子区分 "报文格式错误" 与 "抓取的字节不足"。
编解码器在抛出 TruncatedError 之前恰好调用一次 set_truncated()。
本模块不包含业务逻辑。
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class DecodeFeedback(Protocol):
    """解码反馈钩子接口。"""

    def set_truncated(self) -> None:
        """标记当前输入被截断。"""
        ...


class NilDecodeFeedback:
    """忽略所有反馈的空实现，decode 未传入 feedback 时使用。"""

    def set_truncated(self) -> None:
        pass


NIL_FEEDBACK = NilDecodeFeedback()


@dataclass
class TruncationFlag:
    """记录截断标志的反馈实现。

    每次解码建议使用新的实例。

    Attributes:
        truncated: 是否收到过截断通知。
        calls: set_truncated() 被调用的次数。
    """

    truncated: bool = False
    calls: int = 0

    def set_truncated(self) -> None:
        self.truncated = True
        self.calls += 1
