"""Tencent Cloud SMS channel"""
from sms_tencent.config import ProviderConfig, Settings, get_settings
from sms_tencent.core.services.sms_service import SmsService
from sms_tencent.models.schemas import ConfigValidationResult, SendResult

__all__ = [
    'ProviderConfig',
    'Settings',
    'get_settings',
    'SmsService',
    'SendResult',
    'ConfigValidationResult',
]
