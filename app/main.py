from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.params import Query

from app.config import settings
from app.api.webhook import verify_webhook, process_webhook_payload
from app.api.sessions import router as sessions_router
from app.services.messaging.client import MessagingClient, WhatsApp
from app.services.messaging.records import LoggingCompletionSink
from app.services.messaging.session_store import SessionStore
from app.services.messaging.sweeper import SessionSweeper
from app.services.workflow.dispatcher import ConversationDispatcher
from app.logging import setup_logger, log_exception

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown events handler
    - Starts the expired session sweeper
    - Stops it on shutdown
    """
    app.state.sweeper.start()
    yield
    await app.state.sweeper.stop()
    logger.info("Application shutdown")


def create_app(
    messaging_client: Optional[MessagingClient] = None,
    store: Optional[SessionStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application with its own session store and dispatcher.
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        lifespan=lifespan,
    )

    if messaging_client is None:
        messaging_client = WhatsApp(
            settings.WHATSAPP_TOKEN,
            settings.WHATSAPP_PHONE_NUMBER_ID,
            api_version=settings.WHATSAPP_API_VERSION,
        )
    if store is None:
        store = SessionStore(
            session_timeout=settings.session_timeout,
            record_sink=LoggingCompletionSink(settings.FEEDBACK_LOG_PATH),
        )

    app.state.store = store
    app.state.sweeper = SessionSweeper(store, interval=settings.cleanup_interval)
    app.state.dispatcher = ConversationDispatcher(
        messaging_client, store, trigger_phrase=settings.TRIGGER_PHRASE
    )

    app.include_router(sessions_router, prefix="/api")

    # Root endpoint
    @app.get("/", tags=["root"])
    async def root():
        return JSONResponse(content={"status": "ok"}, status_code=status.HTTP_200_OK)

    # WhatsApp webhook endpoints
    @app.get("/webhook")
    async def webhook_verification(
        hub_mode: str = Query(None, alias="hub.mode"),
        hub_verify_token: str = Query(None, alias="hub.verify_token"),
        hub_challenge: str = Query(None, alias="hub.challenge"),
    ) -> Response:
        return await verify_webhook(hub_mode, hub_verify_token, hub_challenge)

    @app.post("/webhook")
    async def webhook_handler(request: Request):
        try:
            data = await request.json()
            await process_webhook_payload(data, request.app.state.dispatcher)
            return {"status": "success"}
        except Exception as e:
            log_exception(logger, "Error handling webhook", e)
            return JSONResponse(
                content={"status": "error", "message": str(e)},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    return app


app = create_app()
