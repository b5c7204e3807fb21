"""Tests for the channel registry."""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from sms_tencent.core.channels import (
    ChannelRegistry,
    UnknownChannelError,
    channels,
    get_sms_service,
    register_default_channels,
)
from sms_tencent.core.services.sms_service import SmsService


class TestChannelRegistry:

    def setup_method(self):
        self.registry = ChannelRegistry()

    def test_get_builds_once(self, provider_config):
        built = []

        def factory():
            built.append(1)
            return SmsService(config=provider_config)

        self.registry.register("tencent", factory)

        first = self.registry.get("tencent")
        second = self.registry.get("tencent")

        assert first is second
        assert len(built) == 1

    def test_unknown_channel(self):
        with pytest.raises(UnknownChannelError):
            self.registry.get("aliyun")
        with pytest.raises(KeyError):
            self.registry.get("aliyun")

    def test_reregister_drops_cached_instance(self, provider_config):
        self.registry.register("tencent", lambda: SmsService(config=provider_config))
        first = self.registry.get("tencent")
        self.registry.register("tencent", lambda: SmsService(config=provider_config))
        assert self.registry.get("tencent") is not first

    def test_keys_and_has(self):
        self.registry.register("tencent", SmsService)
        assert self.registry.has("tencent")
        assert not self.registry.has("aliyun")
        assert self.registry.keys() == ["tencent"]

    def test_describe(self, provider_config):
        self.registry.register("tencent", lambda: SmsService(config=provider_config))
        assert self.registry.describe() == [{
            "type": "tencent",
            "name": "Tencent Cloud SMS",
            "capabilities": ["verification", "notification", "marketing", "international"],
        }]

    def test_register_default_channels_is_idempotent(self):
        register_default_channels(self.registry)
        first = self.registry.get("tencent")
        register_default_channels(self.registry)
        assert self.registry.get("tencent") is first
        assert isinstance(first, SmsService)


class TestGetSmsService:

    def test_resolves_singleton_from_global_registry(self):
        service = get_sms_service()
        assert isinstance(service, SmsService)
        assert get_sms_service() is service
        assert channels.has("tencent")

    def test_concurrent_first_use_builds_one_service(self):
        workers = 8
        barrier = threading.Barrier(workers)

        def resolve():
            barrier.wait()
            return get_sms_service()

        with ThreadPoolExecutor(max_workers=workers) as pool:
            services = list(pool.map(lambda _: resolve(), range(workers)))

        assert len({id(s) for s in services}) == 1
        assert channels.keys() == ["tencent"]


class TestRegisterIfAbsent:

    def setup_method(self):
        self.registry = ChannelRegistry()

    def test_first_registration_wins(self, provider_config):
        assert self.registry.register_if_absent("tencent", lambda: SmsService(config=provider_config))
        first = self.registry.get("tencent")

        assert not self.registry.register_if_absent("tencent", SmsService)
        assert self.registry.get("tencent") is first

    def test_racing_registrations_keep_one_factory(self, provider_config):
        workers = 8
        barrier = threading.Barrier(workers)

        def register(_):
            barrier.wait()
            return self.registry.register_if_absent("tencent", lambda: SmsService(config=provider_config))

        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(register, range(workers)))

        assert outcomes.count(True) == 1
        assert self.registry.keys() == ["tencent"]
