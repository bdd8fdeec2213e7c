"""
Zenkit 客户端错误类型

所有错误均继承自 ZenkitError，调用方可以按类型分支处理，
例如捕获 RateLimitError 后自行退避重试。
"""

from typing import Optional

from zenkit.schemas.zenkit import ErrorInfo


class ZenkitError(Exception):
    """Base class for all errors raised by this package."""


class NotFoundError(ZenkitError):
    """标识符未匹配任何已缓存或已拉取的对象 (workspace/list/field/user/choice)"""

    def __init__(self, message: str, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class ValidationError(ZenkitError):
    """字段值与字段类型、多值设置或更新动作不匹配"""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        identifier: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.identifier = identifier


class MultipleValuesError(ValidationError):
    """Single-choice field unexpectedly holds more than one value."""


class ApiError(ZenkitError):
    """Zenkit returned a non-success HTTP status."""

    def __init__(
        self,
        status_code: int,
        error_info: Optional[ErrorInfo] = None,
        message: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.error_info = error_info
        if message is None:
            if error_info is not None:
                message = (
                    f"Zenkit API error {status_code}: "
                    f"{error_info.name} ({error_info.code}) {error_info.message}"
                )
            else:
                message = f"Zenkit API error {status_code}"
        super().__init__(message)

    @property
    def code(self) -> Optional[str]:
        return self.error_info.code if self.error_info else None


class RateLimitError(ApiError):
    """请求被 Zenkit 频控拒绝"""


class TransportError(ZenkitError):
    """网络层失败 (连接、超时)，重试耗尽后抛出"""


class DecodeError(ZenkitError):
    """响应体不是合法 JSON 或与期望结构不符"""


class ConcurrencyError(ZenkitError):
    """
    内部锁处于不一致状态。

    缓存完整性无法保证，应重启进程而不是继续使用。
    """


class LifecycleError(ZenkitError):
    """init_api 被重复调用，或在 init_api 之前调用 get_api"""
