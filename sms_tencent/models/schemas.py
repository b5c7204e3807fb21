from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Mainland China mobile number
PHONE_PATTERN = r"^1[3-9][0-9]{9}$"
MAX_BATCH_SIZE = 100

PhoneNumber = Annotated[str, Field(pattern=PHONE_PATTERN)]
TemplateParams = Optional[Union[List[Any], Dict[str, Any]]]


# ==================== API request / response ====================

class SendRequest(BaseModel):
    phone: PhoneNumber = Field(..., description="Mainland mobile number, e.g. 13800138000")
    template_id: str = Field(..., min_length=1, description="Tencent SMS template ID")
    params: TemplateParams = Field(None, description="Template params in placeholder order")


class SendNotificationRequest(SendRequest):
    pass


class SendVerificationRequest(BaseModel):
    phone: PhoneNumber
    code: str = Field(..., min_length=4, max_length=6, description="Verification code")
    expire: Optional[int] = Field(10, ge=1, le=60, description="Minutes until the code expires")


class SendBatchRequest(BaseModel):
    phones: List[PhoneNumber] = Field(..., min_length=1, max_length=MAX_BATCH_SIZE)
    template_id: str = Field(..., min_length=1)
    params: TemplateParams = None


class ApiResponse(BaseModel):
    code: int
    message: str
    data: Any = None


# ==================== Service results ====================

class SendResult(BaseModel):
    """Uniform envelope returned by every SmsService operation"""
    success: bool
    message: str
    data: Optional[Any] = None
    request_id: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "SendResult":
        return cls(success=False, message=message, data=None, request_id=None)

    def to_api_response(self) -> ApiResponse:
        return ApiResponse(code=200 if self.success else 500, message=self.message, data=self.data)


class ConfigValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    # Reserved; nothing produces warnings yet
    warnings: List[str] = Field(default_factory=list)


# ==================== Vendor response ====================

class SendStatus(BaseModel):
    """One entry of the vendor's per-number SendStatusSet"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    serial_no: Optional[str] = Field(None, alias="SerialNo")
    phone_number: Optional[str] = Field(None, alias="PhoneNumber")
    fee: Optional[int] = Field(None, alias="Fee")
    session_context: Optional[str] = Field(None, alias="SessionContext")
    code: str = Field("", alias="Code")
    message: str = Field("", alias="Message")
    iso_code: Optional[str] = Field(None, alias="IsoCode")


class VendorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    send_status_set: List[SendStatus] = Field(default_factory=list, alias="SendStatusSet")
    request_id: Optional[str] = Field(None, alias="RequestId")
    raw: Optional[Dict[str, Any]] = Field(None, exclude=True)

    @classmethod
    def from_api(cls, response: Dict[str, Any]) -> "VendorResponse":
        """Parse the body found under "Response" in a SendSms answer."""
        resp = cls.model_validate(response)
        return resp.model_copy(update={"raw": dict(response)})

    def to_dict(self) -> Dict[str, Any]:
        if self.raw is not None:
            return dict(self.raw)
        return self.model_dump(by_alias=True)
