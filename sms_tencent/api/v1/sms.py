from fastapi import APIRouter, Depends

from sms_tencent.core.channels import channels, get_sms_service
from sms_tencent.core.services.sms_service import SmsService
from sms_tencent.models.schemas import (
    ApiResponse,
    SendBatchRequest,
    SendNotificationRequest,
    SendRequest,
    SendVerificationRequest,
)

router = APIRouter(prefix="/sms/tencent", tags=["Tencent SMS"])
channels_router = APIRouter(prefix="/sms", tags=["SMS Channels"])


@router.post("/send", response_model=ApiResponse)
async def send(req: SendRequest, service: SmsService = Depends(get_sms_service)):
    result = await service.send(req.phone, req.template_id, req.params or [])
    return result.to_api_response()


@router.post("/send-verification", response_model=ApiResponse)
async def send_verification(req: SendVerificationRequest, service: SmsService = Depends(get_sms_service)):
    expire = req.expire if req.expire is not None else 10
    result = await service.send_verification(req.phone, req.code, expire)
    return result.to_api_response()


@router.post("/send-notification", response_model=ApiResponse)
async def send_notification(req: SendNotificationRequest, service: SmsService = Depends(get_sms_service)):
    result = await service.send_notification(req.phone, req.template_id, req.params or [])
    return result.to_api_response()


@router.post("/send-batch", response_model=ApiResponse)
async def send_batch(req: SendBatchRequest, service: SmsService = Depends(get_sms_service)):
    result = await service.send_batch(req.phones, req.template_id, req.params or [])
    return result.to_api_response()


@router.get("/test", response_model=ApiResponse)
async def test_connection(service: SmsService = Depends(get_sms_service)):
    result = await service.test_connection()
    return result.to_api_response()


@router.get("/config", response_model=ApiResponse)
async def get_config(service: SmsService = Depends(get_sms_service)):
    return ApiResponse(code=200, message="config retrieved", data=service.get_config())


@channels_router.get("/channels", response_model=ApiResponse)
async def list_channels():
    return ApiResponse(code=200, message="ok", data=channels.describe())
