"""Configuration for the Tencent Cloud SMS channel"""
from functools import lru_cache
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGION_ID = "ap-guangzhou"
DEFAULT_TIMEOUT = 30

# Checked in this order; error messages follow the same order
REQUIRED_FIELDS = ("secret_id", "secret_key", "sdk_app_id", "sign_name")


class Settings(BaseSettings):
    """Process-wide settings read once from the environment (and .env)"""

    secret_id: str = ""
    secret_key: str = ""
    region_id: str = DEFAULT_REGION_ID
    sdk_app_id: str = ""
    sign_name: str = ""
    timeout: int = DEFAULT_TIMEOUT

    # Template IDs
    template_verification: str = ""
    template_notification: str = ""
    template_marketing: str = ""

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_prefix="TENCENT_SMS_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


class Credentials(BaseModel):
    """API key pair. The secret key is a SecretStr so it never shows up in repr or logs."""

    model_config = ConfigDict(frozen=True)

    secret_id: str = ""
    secret_key: SecretStr = SecretStr("")

    def validation_errors(self) -> List[str]:
        errors = []
        if not self.secret_id:
            errors.append("secret_id must not be empty")
        if not self.secret_key.get_secret_value():
            errors.append("secret_key must not be empty")
        return errors


class TemplateConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    verification: str = ""
    notification: str = ""
    marketing: str = ""


class ProviderConfig(BaseModel):
    """
    Immutable provider configuration.

    Replacing configuration goes through merged(), which returns a new
    instance; holders swap the reference instead of mutating in place.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    secret_id: str = ""
    secret_key: SecretStr = SecretStr("")
    region_id: str = DEFAULT_REGION_ID
    sdk_app_id: str = ""
    sign_name: str = ""
    timeout: int = Field(DEFAULT_TIMEOUT, gt=0)
    templates: TemplateConfig = Field(default_factory=TemplateConfig)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        return cls(
            secret_id=settings.secret_id,
            secret_key=settings.secret_key,
            region_id=settings.region_id or DEFAULT_REGION_ID,
            sdk_app_id=settings.sdk_app_id,
            sign_name=settings.sign_name,
            timeout=settings.timeout,
            templates=TemplateConfig(
                verification=settings.template_verification,
                notification=settings.template_notification,
                marketing=settings.template_marketing,
            ),
        )

    @property
    def credentials(self) -> Credentials:
        return Credentials(secret_id=self.secret_id, secret_key=self.secret_key)

    def merged(self, partial: Mapping[str, Any]) -> "ProviderConfig":
        """Shallow merge: keys in partial override, everything else is kept."""
        data: Dict[str, Any] = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(partial)
        return type(self).model_validate(data)

    def validation_errors(self) -> List[str]:
        values = {
            "secret_id": self.secret_id,
            "secret_key": self.secret_key.get_secret_value(),
            "sdk_app_id": self.sdk_app_id,
            "sign_name": self.sign_name,
        }
        return [f"{name} must not be empty" for name in REQUIRED_FIELDS if not values[name]]

    def public_view(self) -> Dict[str, Any]:
        # Never include secret_id / secret_key here
        return {
            "region_id": self.region_id,
            "sdk_app_id": self.sdk_app_id,
            "sign_name": self.sign_name,
            "timeout": self.timeout,
        }
