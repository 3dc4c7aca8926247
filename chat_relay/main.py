from fastapi import FastAPI

from chat_relay import __version__
from chat_relay.config import settings
from chat_relay.logging_config import setup_logging
from chat_relay.routers import diagnostics, relay

setup_logging(settings.log_level)

app = FastAPI(
    title="Notebook Chat Relay",
    description="Relays notebook chat messages to the n8n chat workflow",
    version=__version__,
    debug=settings.debug,
)

app.include_router(relay.router)
app.include_router(diagnostics.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
