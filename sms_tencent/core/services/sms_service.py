"""
Tencent Cloud SMS service.

Turns the logical operations (send, verification code, notification,
batch) into one SendSms payload shape, checks preconditions before any
network call and normalizes every outcome into a SendResult envelope.
Public operations never raise.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from sms_tencent.config import DEFAULT_REGION_ID, ProviderConfig, get_settings
from sms_tencent.core.providers.sms import SmsTransport, TencentCloudTransport
from sms_tencent.exceptions import InvalidRequestError, TemplateNotConfiguredError
from sms_tencent.models.schemas import MAX_BATCH_SIZE, ConfigValidationResult, SendResult, VendorResponse

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ProviderConfig], SmsTransport]
Params = Optional[Union[Sequence[Any], Mapping[str, Any]]]

CHANNEL_TYPE = "tencent"
CHANNEL_NAME = "Tencent Cloud SMS"


def _mask_phone(phone: str) -> str:
    if len(phone) < 7:
        return phone
    return f"{phone[:3]}****{phone[-4:]}"


def _normalize_params(params: Params) -> List[str]:
    """Template params as an ordered list of strings (mapping values keep insertion order)."""
    if not params:
        return []
    if isinstance(params, Mapping):
        params = list(params.values())
    normalized = []
    for index, value in enumerate(params):
        # bool is an int subclass; "True" is never a meaningful template value
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise InvalidRequestError(f"template param {index} must be a string or number, got {value!r}")
        normalized.append(str(value))
    return normalized


class SmsService:
    channel_type = CHANNEL_TYPE

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        if config is None:
            config = ProviderConfig.from_settings(get_settings())
        self._config = config
        self._transport_factory = transport_factory or TencentCloudTransport.from_config

    # ---------- configuration ----------

    def get_config(self) -> Dict[str, Any]:
        """Public-safe snapshot; credentials are never included."""
        return self._config.public_view()

    def set_config(self, partial: Mapping[str, Any]) -> None:
        """Raises pydantic.ValidationError for unknown keys or bad values; the held config is kept."""
        # Swap in a new frozen config; in-flight calls keep their snapshot
        self._config = self._config.merged(partial)

    def validate_config(self, overrides: Optional[Mapping[str, Any]] = None) -> ConfigValidationResult:
        try:
            config = self._config.merged(overrides) if overrides else self._config
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            return ConfigValidationResult(valid=False, errors=errors, warnings=[])
        errors = config.validation_errors()
        return ConfigValidationResult(valid=not errors, errors=errors, warnings=[])

    # ---------- sending ----------

    async def send(self, phone: str, template_id: str, params: Params = None) -> SendResult:
        config = self._config
        try:
            error = self._check_config(config)
            if error:
                return self._fail("send failed", error, phones=[phone], template_id=template_id)
            self._check_request([phone], template_id)

            response = await self._dispatch(config, [phone], template_id, params)
            if not response.send_status_set:
                return self._fail("send failed", "empty send status set", phones=[phone], template_id=template_id)

            status = response.send_status_set[0]
            success = status.code == "Ok"
            if success:
                logger.info("SMS sent to %s (template %s)", _mask_phone(phone), template_id)
            else:
                logger.error(
                    "Tencent SMS send rejected: phone=%s template=%s error=%s %s",
                    phone, template_id, status.code, status.message,
                )
            return SendResult(
                success=success,
                message=status.message or "sent successfully",
                data=response.to_dict(),
                request_id=response.request_id,
            )
        except Exception as e:
            return self._fail("send failed", str(e), phones=[phone], template_id=template_id)

    async def send_verification(self, phone: str, code: str, expire_minutes: int = 10) -> SendResult:
        template_id = self._config.templates.verification
        if not template_id:
            return self._template_missing("verification", phone)
        # Placeholder order in the template: code first, expiry second
        return await self.send(phone, template_id, [code, str(expire_minutes)])

    async def send_notification(self, phone: str, template_id: str, params: Params = None) -> SendResult:
        return await self.send(phone, template_id, params)

    async def send_marketing(self, phone: str, params: Params = None) -> SendResult:
        template_id = self._config.templates.marketing
        if not template_id:
            return self._template_missing("marketing", phone)
        return await self.send(phone, template_id, params)

    async def send_batch(self, phones: Sequence[str], template_id: str, params: Params = None) -> SendResult:
        """
        Send one template to up to 100 numbers in a single request.

        success only means the vendor answered with a non-empty status
        list; individual numbers may still have failed, see data.
        """
        phones = list(phones)
        config = self._config
        try:
            error = self._check_config(config)
            if error:
                return self._fail("batch send failed", error, phones=phones, template_id=template_id)
            self._check_request(phones, template_id)

            response = await self._dispatch(config, phones, template_id, params)
            logger.info(
                "Batch SMS to %d numbers (template %s): %d statuses returned",
                len(phones), template_id, len(response.send_status_set),
            )
            return SendResult(
                success=bool(response.send_status_set),
                message="batch send completed",
                data=response.to_dict(),
                request_id=response.request_id,
            )
        except Exception as e:
            return self._fail("batch send failed", str(e), phones=phones, template_id=template_id)

    async def test_connection(self, overrides: Optional[Mapping[str, Any]] = None) -> SendResult:
        """Validate config and build a client; no network call is made."""
        try:
            config = self._config.merged(overrides) if overrides else self._config
            error = self._check_config(config)
            if error:
                return SendResult.failure(f"connection test failed: {error}")
            self._transport_factory(config)
        except Exception as e:
            logger.error("Tencent SMS client construction failed: %s", e)
            return SendResult.failure(f"connection test failed: {e}")
        return SendResult(
            success=True,
            message="connection healthy",
            data={
                "region_id": config.region_id,
                "sdk_app_id": config.sdk_app_id,
                "sign_name": config.sign_name,
            },
        )

    # ---------- channel metadata ----------

    def get_name(self) -> str:
        return CHANNEL_NAME

    def get_capabilities(self) -> List[str]:
        return ["verification", "notification", "marketing", "international"]

    def supports_international(self) -> bool:
        return True

    def get_supported_regions(self) -> List[str]:
        return ["CN", "HK", "US", "SG", "JP", "KR"]

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "name": "Tencent Cloud",
            "website": "https://cloud.tencent.com/",
            "description": "Tencent Cloud SMS service",
            "regions": [
                "ap-guangzhou", "ap-beijing", "ap-shanghai",
                "ap-hongkong", "ap-singapore", "na-siliconvalley",
            ],
        }

    def get_config_fields(self) -> List[Dict[str, Any]]:
        """Form descriptors for configuring this channel"""
        return [
            {"name": "secret_id", "label": "Secret ID", "type": "text", "required": True, "default": ""},
            {"name": "secret_key", "label": "Secret Key", "type": "password", "required": True, "default": ""},
            {"name": "region_id", "label": "Region ID", "type": "text", "required": False, "default": DEFAULT_REGION_ID},
            {"name": "sdk_app_id", "label": "SDK App ID", "type": "text", "required": True, "default": ""},
            {"name": "sign_name", "label": "Sign Name", "type": "text", "required": True, "default": ""},
        ]

    # ---------- internals ----------

    @staticmethod
    def _check_config(config: ProviderConfig) -> Optional[str]:
        errors = config.validation_errors()
        return ", ".join(errors) if errors else None

    @staticmethod
    def _check_request(phones: List[str], template_id: str) -> None:
        if not phones:
            raise InvalidRequestError("phone numbers must not be empty")
        if len(phones) > MAX_BATCH_SIZE:
            raise InvalidRequestError(f"at most {MAX_BATCH_SIZE} phone numbers per request")
        if not template_id:
            raise InvalidRequestError("template_id must not be empty")

    async def _dispatch(
        self,
        config: ProviderConfig,
        phones: List[str],
        template_id: str,
        params: Params,
    ) -> VendorResponse:
        payload = {
            "sdk_app_id": config.sdk_app_id,
            "sign_name": config.sign_name,
            "template_id": template_id,
            "phone_number_set": phones,
            "template_param_set": _normalize_params(params),
        }
        transport = self._transport_factory(config)
        return await transport.send_sms(payload)

    @staticmethod
    def _template_missing(kind: str, phone: str) -> SendResult:
        error = TemplateNotConfiguredError(kind)
        logger.error(
            "Tencent SMS send failed: phones=%s template=%s error=%s",
            [phone], f"<{kind}: not configured>", error,
        )
        return SendResult.failure(str(error))

    @staticmethod
    def _fail(prefix: str, error: str, phones: List[str], template_id: str) -> SendResult:
        logger.error(
            "Tencent SMS %s: phones=%s template=%s error=%s",
            prefix, phones, template_id, error,
        )
        return SendResult.failure(f"{prefix}: {error}")
