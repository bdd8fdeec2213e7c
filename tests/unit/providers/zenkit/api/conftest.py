"""
API 测试共享 Fixtures

提供 API 测试中通用的客户端和响应构造函数。
"""

from __future__ import annotations

from typing import Any

import pytest_asyncio
from httpx import Response

from zenkit.core.zenkit_client import ZenkitClient

BASE_URL = "https://mock.zenkit/api/v1"


def create_mock_response(data: Any, status_code: int = 200) -> Response:
    """
    创建模拟 HTTP 响应对象。

    Args:
        data: 响应 JSON 数据
        status_code: HTTP 状态码

    Returns:
        可直接交给 respx 的 httpx.Response
    """
    return Response(status_code, json=data)


@pytest_asyncio.fixture
async def client():
    """不做退避等待的 ZenkitClient"""
    c = ZenkitClient(token="test_token", base_url=BASE_URL)
    c.RETRY_MIN_WAIT = 0
    c.RETRY_MAX_WAIT = 0
    yield c
    await c.close()
