import logging
from typing import Optional

import httpx

from zenkit.core.config import settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "Zenkit-API-Key"


def _mask_token(token: str, visible_chars: int = 4) -> str:
    """对 token 进行脱敏处理，仅显示前几个字符"""
    if not token or len(token) <= visible_chars:
        return "***"
    return f"{token[:visible_chars]}***"


class ZenkitAuth(httpx.Auth):
    """
    Custom Auth for the Zenkit REST API.
    Injects the personal API token as the Zenkit-API-Key header.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token or settings.ZENKIT_API_TOKEN
        if not self._token:
            raise ValueError(
                "ZENKIT_API_TOKEN is not configured, cannot authenticate requests"
            )
        logger.debug("ZenkitAuth using token %s", _mask_token(self._token))

    @property
    def masked_token(self) -> str:
        return _mask_token(self._token)

    def auth_flow(self, request: httpx.Request):
        request.headers[API_KEY_HEADER] = self._token
        yield request
