"""SMS channel registry"""
import logging
import threading
from typing import Any, Callable, Dict, List

from sms_tencent.core.services.sms_service import CHANNEL_TYPE, SmsService

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[], Any]


class UnknownChannelError(KeyError):
    pass


class ChannelRegistry:
    """
    Holds channel factories keyed by channel type ("tencent", ...).
    Each channel is built on first use and then reused.
    """

    def __init__(self):
        self._factories: Dict[str, ChannelFactory] = {}
        self._instances: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, key: str, factory: ChannelFactory) -> None:
        with self._lock:
            if key in self._factories:
                logger.warning("Replacing SMS channel registration: %s", key)
            self._factories[key] = factory
            self._instances.pop(key, None)

    def register_if_absent(self, key: str, factory: ChannelFactory) -> bool:
        """Register unless the key is taken; the check and the insert share the lock."""
        with self._lock:
            if key in self._factories:
                return False
            self._factories[key] = factory
            return True

    def has(self, key: str) -> bool:
        return key in self._factories

    def keys(self) -> List[str]:
        return list(self._factories)

    def get(self, key: str) -> Any:
        with self._lock:
            if key in self._instances:
                return self._instances[key]
            if key not in self._factories:
                raise UnknownChannelError(f"Unknown SMS channel: {key}")
            instance = self._factories[key]()
            self._instances[key] = instance
            return instance

    def describe(self) -> List[Dict[str, Any]]:
        result = []
        for key in self.keys():
            channel = self.get(key)
            result.append({
                "type": key,
                "name": channel.get_name(),
                "capabilities": channel.get_capabilities(),
            })
        return result

    def clear(self) -> None:
        with self._lock:
            self._factories.clear()
            self._instances.clear()


# Process-wide registry
channels = ChannelRegistry()


def register_default_channels(registry: ChannelRegistry = channels) -> None:
    """Called at startup and by get_sms_service; repeated calls are no-ops"""
    if registry.register_if_absent(CHANNEL_TYPE, SmsService):
        logger.info("Registered SMS channel: %s", CHANNEL_TYPE)


def get_sms_service() -> SmsService:
    """FastAPI dependency resolving the Tencent channel"""
    register_default_channels(channels)
    return channels.get(CHANNEL_TYPE)
