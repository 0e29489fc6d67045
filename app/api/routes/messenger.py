from fastapi import APIRouter, BackgroundTasks, Query, Request, Response
from fastapi.responses import PlainTextResponse
from loguru import logger

from app.domain.services.dispatcher import MessageDispatcher
from app.domain.services.event_parser import parse_webhook_batch

router = APIRouter()


def _dispatcher(request: Request) -> MessageDispatcher:
    return request.app.state.dispatcher


@router.get("/webhook", response_class=PlainTextResponse)
async def verify(
    request: Request,
    hub_mode: str | None = Query(default=None, alias="hub.mode"),
    hub_verify_token: str | None = Query(default=None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(default=None, alias="hub.challenge"),
):
    expected = request.app.state.settings.VERIFY_TOKEN
    if hub_mode == "subscribe" and expected and hub_verify_token == expected:
        logger.info("Webhook verified")
        return PlainTextResponse(hub_challenge or "")
    logger.warning("Webhook verification failed (mode={})", hub_mode)
    return Response(status_code=403)


@router.post("/webhook")
async def webhook(request: Request, background_tasks: BackgroundTasks):
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return Response(status_code=400)

    if not isinstance(body, dict) or body.get("object") != "page":
        return Response(status_code=404)

    events, skipped = parse_webhook_batch(body)
    logger.info("Webhook batch: {} event(s), {} skipped", len(events), skipped)

    if events:
        background_tasks.add_task(_dispatcher(request).dispatch, events)

    return PlainTextResponse("EVENT_RECEIVED")
