import walletbot.logging_config
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.api.v1.webhook import router as webhook_router, conversation_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    local_now = TimezoneHelper.get_local_now()
    logger.info(f"[TIMEZONE] Bot time: {local_now.strftime('%d/%m/%Y %H:%M:%S %Z')}")
    yield
    await conversation_manager.close()


app = FastAPI(title="WalletBot – WhatsApp", lifespan=lifespan)

app.include_router(webhook_router)

@app.get("/")
async def root():
    return {"message": "WalletBot – WhatsApp"}
