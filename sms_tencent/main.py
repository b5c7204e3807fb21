import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sms_tencent.api.v1.sms import channels_router
from sms_tencent.api.v1.sms import router as sms_router
from sms_tencent.config import get_settings
from sms_tencent.core.channels import register_default_channels

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    register_default_channels()
    logger.info("[Startup] SMS channels registered.")
    yield


def create_app() -> FastAPI:
    setup_logging(get_settings().log_level)
    app = FastAPI(title="Tencent Cloud SMS API", version="1.0.0", lifespan=lifespan)
    app.include_router(sms_router, prefix="/api/v1")
    app.include_router(channels_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"ok": True, "service": "sms-tencent"}

    return app


app = create_app()
