"""Error types raised inside the SMS channel.

None of these escape the public SmsService operations; they are turned
into failure envelopes at the operation boundary.
"""
from typing import List, Optional


class SmsError(Exception):
    """Base class for SMS channel errors"""


class ConfigError(SmsError):
    """Required credential / identity fields are missing"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


class TransportError(SmsError):
    """The vendor call failed, timed out or answered with an error"""

    def __init__(self, message: str, code: Optional[str] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.request_id = request_id


class TemplateNotConfiguredError(SmsError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"{kind} template not configured")


class InvalidRequestError(SmsError):
    """Request rejected before any vendor call (no phones, too many phones, blank template)"""
