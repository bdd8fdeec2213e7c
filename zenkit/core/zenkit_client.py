import logging
from typing import Any, Optional, Type, TypeVar

import httpx
import pydantic
from pydantic import TypeAdapter
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from zenkit.core.auth import ZenkitAuth
from zenkit.core.config import settings
from zenkit.core.errors import ApiError, DecodeError, RateLimitError, TransportError
from zenkit.schemas.zenkit import ErrorResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "zenkit-client-python/0.1.0"

# 定义可重试的异常类型
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.RemoteProtocolError,
)


def _should_retry_response(response: httpx.Response) -> bool:
    """检查响应是否需要重试（5xx 服务端错误）"""
    return response.status_code >= 500


class RetryableHTTPError(Exception):
    """可重试的 HTTP 错误"""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}: {response.text[:200]}")


class ZenkitClient:
    """
    Zenkit REST API 异步客户端

    特性:
    - 自动注入认证头 (Zenkit-API-Key) 和 User-Agent
    - 自动重试机制 (网络错误、超时、5xx 错误)，频控 (429) 不重试，直接抛出 RateLimitError
    - 指数退避策略
    - 错误响应统一转换为 ApiError / RateLimitError
    """

    RETRY_MIN_WAIT = 1  # 最小等待时间（秒）
    RETRY_MAX_WAIT = 10  # 最大等待时间（秒）

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.ZENKIT_API_ENDPOINT).rstrip("/")
        self.max_retries = max_retries or settings.ZENKIT_MAX_RETRIES
        self.rate_limit_codes = frozenset(settings.ZENKIT_RATE_LIMIT_CODES)
        auth = ZenkitAuth(token)
        logger.info(
            "Initializing ZenkitClient with base_url=%s token=%s",
            self.base_url,
            auth.masked_token,
        )
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
            auth=auth,
            timeout=httpx.Timeout(timeout or settings.ZENKIT_HTTP_TIMEOUT),
            trust_env=False,
        )

    async def __aenter__(self) -> "ZenkitClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_retry_decorator(self):
        """获取重试装饰器配置"""
        return retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(
                multiplier=1, min=self.RETRY_MIN_WAIT, max=self.RETRY_MAX_WAIT
            ),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS + (RetryableHTTPError,)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """
        带重试的请求方法

        Args:
            method: HTTP 方法 (GET, POST, PUT, DELETE)
            path: API 路径，相对于 base_url
            json: 请求体 (可选)
            params: 查询参数 (可选)

        Returns:
            httpx.Response。5xx 重试耗尽后返回最后一次的响应，由 parse() 转为 ApiError

        Raises:
            TransportError: 网络错误重试耗尽
        """

        @self._get_retry_decorator()
        async def _do_request():
            logger.debug("Making %s request to %s", method, path)
            if json is not None:
                logger.debug("%s payload: %s", method, json)
            response = await self.client.request(method, path, json=json, params=params)
            logger.debug("Response status: %d from %s", response.status_code, path)

            if _should_retry_response(response):
                logger.warning(
                    "Received %d from %s, will retry...", response.status_code, path
                )
                raise RetryableHTTPError(response)
            return response

        try:
            response = await _do_request()
        except RetryableHTTPError as e:
            logger.error(
                "Giving up on %s %s after %d attempts (HTTP %d)",
                method,
                path,
                self.max_retries,
                e.response.status_code,
            )
            return e.response
        except (httpx.HTTPError, RetryError) as e:
            logger.error("%s %s failed (network error): %s", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.error(
                "HTTP error %d from %s: %s",
                response.status_code,
                path,
                response.text[:200],
            )
        else:
            logger.info(
                "Request successful: %s %s -> %d", method, path, response.status_code
            )
        return response

    async def get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        """GET 请求（带自动重试）"""
        return await self._request_with_retry("GET", path, params=params)

    async def post(self, path: str, json: Optional[Any] = None) -> httpx.Response:
        """POST 请求（带自动重试）"""
        return await self._request_with_retry("POST", path, json=json)

    async def put(self, path: str, json: Optional[Any] = None) -> httpx.Response:
        """PUT 请求（带自动重试）"""
        return await self._request_with_retry("PUT", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        """DELETE 请求（带自动重试）"""
        return await self._request_with_retry("DELETE", path)

    def _raise_for_error(self, response: httpx.Response) -> None:
        error_info = None
        try:
            error_info = ErrorResult.model_validate(response.json()).error
        except (ValueError, pydantic.ValidationError):
            logger.debug("Error body from %s is not a Zenkit error object", response.url)

        is_rate_limited = response.status_code == 429 or (
            error_info is not None
            and (
                error_info.code in self.rate_limit_codes
                or error_info.name in self.rate_limit_codes
            )
        )
        if is_rate_limited:
            logger.warning("Rate limited by Zenkit: %s", response.url)
            raise RateLimitError(response.status_code, error_info)
        raise ApiError(response.status_code, error_info)

    def parse(self, response: httpx.Response, response_type: Optional[Type[T]] = None) -> Any:
        """
        解析响应

        Args:
            response: httpx 响应
            response_type: 期望的类型 (pydantic 模型或 List[Model] 等)，为空时返回原始 JSON

        Raises:
            RateLimitError: 429 或配置的频控错误码
            ApiError: 其他非 2xx 响应
            DecodeError: 响应体不是 JSON 或不符合期望结构
        """
        if response.status_code >= 400:
            self._raise_for_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON from {response.url}: {e}") from e

        if response_type is None:
            return data
        try:
            return TypeAdapter(response_type).validate_python(data)
        except pydantic.ValidationError as e:
            logger.error("Unexpected response shape from %s: %s", response.url, e)
            raise DecodeError(f"Unexpected response from {response.url}: {e}") from e

    async def request_json(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[dict] = None,
        response_type: Optional[Type[T]] = None,
    ) -> Any:
        response = await self._request_with_retry(method, path, json=json, params=params)
        return self.parse(response, response_type)

    async def close(self):
        """关闭客户端连接"""
        logger.info("Closing ZenkitClient connection")
        await self.client.aclose()
