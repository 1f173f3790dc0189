# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from linkproto_core.config import CodecConfig
from linkproto_core.feedback import TruncationFlag


@pytest.fixture
def default_config() -> CodecConfig:
    """[Fixture] 默认配置 (不修正长度，尾部字段不限定)。"""
    return CodecConfig()


@pytest.fixture
def bounded_config() -> CodecConfig:
    """[Fixture] 尾部字段限定在声明长度之内的配置。"""
    return CodecConfig(bound_to_declared_length=True)


@pytest.fixture
def feedback() -> TruncationFlag:
    """[Fixture] 每个测试一个新的截断反馈记录器。"""
    return TruncationFlag()


# --- 典型报文 ---


@pytest.fixture
def auth_challenge_bytes() -> bytes:
    """code=1, id=5, length=10, valueSize=4, value=AABBCCDD, name='hi'"""
    return bytes.fromhex("0105000a04aabbccdd6869")


@pytest.fixture
def config_offer_bytes() -> bytes:
    """Offer: 192.168.1.1 / 255.255.255.0"""
    return bytes.fromhex("01000bc0a80101ffffff00")


@pytest.fixture
def frame_bytes() -> bytes:
    """selector=7, remainder=DEADBEEF"""
    return bytes.fromhex("07deadbeef")
