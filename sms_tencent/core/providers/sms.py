import hashlib
import hmac
import json
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from sms_tencent.config import Credentials, ProviderConfig
from sms_tencent.exceptions import ConfigError, TransportError
from sms_tencent.models.schemas import VendorResponse

logger = logging.getLogger(__name__)

TENCENT_SMS_HOST = "sms.tencentcloudapi.com"
TENCENT_SMS_ENDPOINT = f"https://{TENCENT_SMS_HOST}/"
TENCENT_SMS_SERVICE = "sms"
TENCENT_SMS_VERSION = "2021-01-11"
TENCENT_SMS_ACTION = "SendSms"

SIGN_ALGORITHM = "TC3-HMAC-SHA256"
CONTENT_TYPE = "application/json"

# Adapter payload key -> SendSms request field
PAYLOAD_FIELDS = {
    "sdk_app_id": "SmsSdkAppId",
    "sign_name": "SignName",
    "template_id": "TemplateId",
    "phone_number_set": "PhoneNumberSet",
    "template_param_set": "TemplateParamSet",
}


class SmsTransport(ABC):
    @abstractmethod
    async def send_sms(self, payload: Dict[str, Any]) -> VendorResponse:
        """Send one SendSms request; raise TransportError on any failure."""
        ...


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def build_tc3_authorization(
    credentials: Credentials,
    timestamp: int,
    body: str,
    action: str = TENCENT_SMS_ACTION,
    host: str = TENCENT_SMS_HOST,
    service: str = TENCENT_SMS_SERVICE,
) -> str:
    """
    Build the TC3-HMAC-SHA256 Authorization header for a JSON POST.
    Signs content-type, host and x-tc-action.
    """
    date = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")

    canonical_headers = (
        f"content-type:{CONTENT_TYPE}\n"
        f"host:{host}\n"
        f"x-tc-action:{action.lower()}\n"
    )
    signed_headers = "content-type;host;x-tc-action"
    hashed_payload = hashlib.sha256(body.encode("utf-8")).hexdigest()
    canonical_request = "\n".join([
        "POST",
        "/",
        "",
        canonical_headers,
        signed_headers,
        hashed_payload,
    ])

    credential_scope = f"{date}/{service}/tc3_request"
    string_to_sign = "\n".join([
        SIGN_ALGORITHM,
        str(timestamp),
        credential_scope,
        hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
    ])

    secret_key = credentials.secret_key.get_secret_value()
    secret_date = _hmac_sha256(f"TC3{secret_key}".encode("utf-8"), date)
    secret_service = _hmac_sha256(secret_date, service)
    secret_signing = _hmac_sha256(secret_service, "tc3_request")
    signature = hmac.new(secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    return (
        f"{SIGN_ALGORITHM} "
        f"Credential={credentials.secret_id}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, "
        f"Signature={signature}"
    )


class TencentCloudTransport(SmsTransport):
    """SendSms over the Tencent Cloud API 3.0 HTTP interface"""

    def __init__(
        self,
        credentials: Credentials,
        region_id: str,
        timeout: float = 30,
        endpoint: str = TENCENT_SMS_ENDPOINT,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        errors = credentials.validation_errors()
        if errors:
            raise ConfigError(errors)
        self.credentials = credentials
        self.region_id = region_id
        self.timeout = timeout
        self.endpoint = endpoint
        # Lets tests plug in httpx.MockTransport
        self._http_transport = http_transport

    @classmethod
    def from_config(cls, config: ProviderConfig, **kwargs: Any) -> "TencentCloudTransport":
        return cls(
            credentials=config.credentials,
            region_id=config.region_id,
            timeout=config.timeout,
            **kwargs,
        )

    def _build_body(self, payload: Dict[str, Any]) -> str:
        request = {vendor: payload[key] for key, vendor in PAYLOAD_FIELDS.items() if key in payload}
        return json.dumps(request, ensure_ascii=False)

    def _build_headers(self, body: str, timestamp: int) -> Dict[str, str]:
        return {
            "Authorization": build_tc3_authorization(self.credentials, timestamp, body),
            "Content-Type": CONTENT_TYPE,
            "Host": TENCENT_SMS_HOST,
            "X-TC-Action": TENCENT_SMS_ACTION,
            "X-TC-Timestamp": str(timestamp),
            "X-TC-Version": TENCENT_SMS_VERSION,
            "X-TC-Region": self.region_id,
        }

    async def send_sms(self, payload: Dict[str, Any]) -> VendorResponse:
        body = self._build_body(payload)
        headers = self._build_headers(body, int(time.time()))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._http_transport) as client:
                resp = await client.post(self.endpoint, content=body.encode("utf-8"), headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"request failed: {e}") from e

        if resp.status_code != 200:
            raise TransportError(f"HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            result = resp.json()
        except ValueError as e:
            raise TransportError(f"invalid JSON response: {resp.text[:200]}") from e

        resp_data = result.get("Response") if isinstance(result, dict) else None
        if not isinstance(resp_data, dict):
            raise TransportError("invalid response: missing Response")

        if "Error" in resp_data:
            error = resp_data.get("Error") or {}
            code = error.get("Code", "Unknown")
            raise TransportError(
                f"{code}: {error.get('Message', 'Unknown error')}",
                code=code,
                request_id=resp_data.get("RequestId"),
            )

        logger.debug("SendSms answered, request id %s", resp_data.get("RequestId"))
        return VendorResponse.from_api(resp_data)
