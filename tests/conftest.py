"""Shared fixtures for the SMS channel tests"""
from typing import Any, Dict, List, Optional

import pytest

from sms_tencent.config import ProviderConfig, TemplateConfig, get_settings
from sms_tencent.core.channels import channels
from sms_tencent.core.providers.sms import SmsTransport
from sms_tencent.core.services.sms_service import SmsService
from sms_tencent.models.schemas import SendStatus, VendorResponse

SECRET_KEY = "sk-very-secret-value-9f8e7d"
PHONE = "13800138000"


class StubTransport(SmsTransport):
    """Records payloads and answers with a canned response or error."""

    def __init__(self, response: Optional[VendorResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def send_sms(self, payload: Dict[str, Any]) -> VendorResponse:
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        return self.response


def vendor_response(*statuses, request_id: Optional[str] = "req-1") -> VendorResponse:
    return VendorResponse(
        send_status_set=[SendStatus(code=code, message=message) for code, message in statuses],
        request_id=request_id,
    )


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    for name in (
        "TENCENT_SMS_SECRET_ID", "TENCENT_SMS_SECRET_KEY", "TENCENT_SMS_REGION_ID",
        "TENCENT_SMS_SDK_APP_ID", "TENCENT_SMS_SIGN_NAME", "TENCENT_SMS_TIMEOUT",
        "TENCENT_SMS_TEMPLATE_VERIFICATION", "TENCENT_SMS_TEMPLATE_NOTIFICATION",
        "TENCENT_SMS_TEMPLATE_MARKETING",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    channels.clear()


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        secret_id="AKIDtest",
        secret_key=SECRET_KEY,
        region_id="ap-beijing",
        sdk_app_id="1400000000",
        sign_name="TestSign",
        timeout=15,
        templates=TemplateConfig(verification="100001", notification="100002", marketing="100003"),
    )


@pytest.fixture
def stub() -> StubTransport:
    return StubTransport(response=vendor_response(("Ok", "")))


@pytest.fixture
def service(provider_config, stub) -> SmsService:
    return SmsService(config=provider_config, transport_factory=lambda config: stub)
