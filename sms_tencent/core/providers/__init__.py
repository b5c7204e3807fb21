"""SMS transports"""
from sms_tencent.core.providers.sms import SmsTransport, TencentCloudTransport

__all__ = ['SmsTransport', 'TencentCloudTransport']
