import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from dotenv import load_dotenv

from app.routes import slack
from app.slack_utils import SlackClient
from core.config import get_settings
from core.database import init_db

# Ensure .env values are loaded even if uvicorn is launched without `dotenv run`.
# Use override=True so editing `.env` (and restarting uvicorn) reliably takes effect even if
# older values exist in the environment from a previous shell/session.
load_dotenv(override=True)

log = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db()
    async with SlackClient(settings.slack_token, settings.slack_channel) as client:
        app.state.slack = client
        log.info("Slack app ready", extra={"channel": settings.slack_channel})
        yield


app = FastAPI(lifespan=lifespan)


app.include_router(slack.router)


@app.get("/health")
def health():
    return {"ok": True}
