import pytest

from ec2_describe_tags.common.config import ENV_DEFAULTS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's AWS environment out of the tests."""
    for name in ENV_DEFAULTS.values():
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
    monkeypatch.setenv("AWS_CONFIG_FILE", "/nonexistent/aws-config")
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", "/nonexistent/aws-credentials")
