from zenkit.core.config import Settings


def test_defaults(monkeypatch):
    """测试默认配置"""
    monkeypatch.delenv("ZENKIT_API_ENDPOINT", raising=False)
    monkeypatch.delenv("ZENKIT_MAX_RETRIES", raising=False)
    s = Settings(_env_file=None)

    assert s.ZENKIT_API_ENDPOINT == "https://zenkit.com/api/v1"
    assert s.ZENKIT_HTTP_TIMEOUT == 30.0
    assert s.ZENKIT_MAX_RETRIES == 3
    assert "RATE_LIMIT_EXCEEDED" in s.ZENKIT_RATE_LIMIT_CODES


def test_env_override(monkeypatch):
    """测试环境变量覆盖"""
    monkeypatch.setenv("ZENKIT_API_TOKEN", "env_token")
    monkeypatch.setenv("ZENKIT_MAX_RETRIES", "5")
    monkeypatch.setenv("ZENKIT_RATE_LIMIT_CODES", '["SLOW_DOWN"]')
    s = Settings(_env_file=None)

    assert s.ZENKIT_API_TOKEN == "env_token"
    assert s.ZENKIT_MAX_RETRIES == 5
    assert s.ZENKIT_RATE_LIMIT_CODES == ["SLOW_DOWN"]
