from fastapi import FastAPI
from loguru import logger

from app.api.routes import api_router
from app.core.config import Settings, settings as default_settings
from app.core.logging_config import setup_logging
from app.domain.flows import get_flow
from app.domain.services.conversation_engine import ConversationEngine
from app.domain.services.dispatcher import MessageDispatcher, MessageSender
from app.domain.services.report_sink import LoggingReportSink, ReportSink
from app.domain.services.session_store import SessionStore
from app.infrastructure.external.messenger_api import MessengerClient
from app.infrastructure.external.report_webhook import HttpReportSink
from app.infrastructure.jobs.session_sweeper import SessionSweeper


def create_app(
    settings: Settings | None = None,
    sender: MessageSender | None = None,
    sink: ReportSink | None = None,
) -> FastAPI:
    settings = settings or default_settings

    flow = get_flow(settings.FLOW_VARIANT)
    store = SessionStore(flow.entry_step, flow.step_names)

    if sink is None:
        if settings.REPORT_WEBHOOK_URL:
            sink = HttpReportSink(settings.REPORT_WEBHOOK_URL, timeout=settings.REPORT_TIMEOUT_SECONDS)
        else:
            sink = LoggingReportSink()
    engine = ConversationEngine(flow, store, sink, finalize_timeout=settings.REPORT_TIMEOUT_SECONDS)

    if sender is None:
        sender = MessengerClient(
            settings.PAGE_ACCESS_TOKEN,
            api_base=settings.GRAPH_API_BASE,
            api_version=settings.GRAPH_API_VERSION,
            timeout=settings.SEND_TIMEOUT_SECONDS,
        )
    dispatcher = MessageDispatcher(engine, sender, send_timeout=settings.SEND_TIMEOUT_SECONDS)
    sweeper = SessionSweeper(
        store,
        interval=settings.SESSION_SWEEP_INTERVAL_SECONDS,
        max_idle=settings.SESSION_IDLE_TIMEOUT_SECONDS,
    )

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.state.sweeper = sweeper

    @app.on_event("startup")
    async def startup():
        if not settings.VERIFY_TOKEN or not settings.PAGE_ACCESS_TOKEN:
            logger.error("VERIFY_TOKEN and PAGE_ACCESS_TOKEN are required; webhook will not work")
        sweeper.start()
        logger.info("Relief bot started (flow={}, env={})", flow.name, settings.ENVIRONMENT)

    @app.on_event("shutdown")
    async def shutdown():
        await sweeper.stop()

    app.include_router(api_router)
    return app


setup_logging(default_settings.LOG_LEVEL)
app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.PORT)
