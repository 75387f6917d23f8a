from fastapi import FastAPI

from app.api.webhooks import router as webhooks_router
from app.core.config import settings
from app.core.log_config import configure_logging

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="WhatsApp Booking Assistant", version="1.0.0")
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.ENV}
