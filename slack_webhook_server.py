from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from datetime import datetime, timezone
import logging

from clients.reservations import HospitableReservationClient
from interfaces.slack import SlackInterface
from interfaces.slack.services.channel_client import ChannelClientError
from routing.checkout_scheduler import CheckoutScheduler, uniform_offset
from routing.notification_router import NotificationRouter
from routing.notifier import ActionItemNotifier
from routing.rules import build_action_item_rules, build_negative_sentiment_rules, negative_sentiment_for_property
from routing.thread_locator import WeekThreadLocator
from runtime.config import get_config

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create a FastAPI instance
app = FastAPI(
    title="Hostbuddy Slack Integration",
    description="Routes property-management action items to Slack notifications",
    version="1.0.0"
)

config = get_config()

# Slack interface (Web API clients + interactivity)
slack_interface = SlackInterface(config)
slack_handler = slack_interface.get_fastapi_handler()
channel_client = slack_interface.channel_client

reservation_client = HospitableReservationClient(api_token=config.hospitable_api_token)

thread_locator = WeekThreadLocator(
    channel_client,
    channel=config.review_channel,
    channel_name=config.review_channel_name,
    timezone=config.week_timezone,
    search_count=config.search_count,
)
checkout_scheduler = CheckoutScheduler(
    channel_client,
    channel=config.operations_channel,
    on_call_user_id=config.on_call_user_id,
    platform=config.scheduling_platform,
    horizon_days=config.horizon_days,
    offset_source=uniform_offset(config.offset_minutes_min, config.offset_minutes_max),
)
notifier = ActionItemNotifier(channel_client, thread_locator, checkout_scheduler, config)

action_item_router = NotificationRouter(
    build_action_item_rules(notifier, config),
    reservation_client,
    pacing_seconds=config.webhook_pacing_seconds,
)
negative_sentiment_router = NotificationRouter(
    build_negative_sentiment_rules(notifier),
    reservation_client,
    pacing_seconds=config.negative_sentiment_pacing_seconds,
    item_filter=negative_sentiment_for_property(config.negative_sentiment_code),
)


async def _route_webhook(request: Request, router: NotificationRouter, name: str):
    try:
        payload = await request.json()

        action_items = payload.get("action_items") if isinstance(payload, dict) else None
        if not isinstance(action_items, list):
            logger.info(f"{name} webhook received with no action_items")
            return PlainTextResponse("OK", status_code=200)

        await router.route_batch(action_items)
        return PlainTextResponse("OK", status_code=200)

    except Exception as e:
        logger.error(f"Error processing {name} webhook: {e}")
        return PlainTextResponse("Internal Server Error", status_code=500)


@app.post("/webhook")
async def hostbuddy_webhook(request: Request):
    """Action item batches from Hostbuddy"""
    return await _route_webhook(request, action_item_router, "Hostbuddy")


@app.post("/a008")
async def negative_sentiment_webhook(request: Request):
    """Negative sentiment reminders only, for the configured property"""
    return await _route_webhook(request, negative_sentiment_router, config.negative_sentiment_code)


@app.post("/slack/interactive")
async def slack_interactive_endpoint(request: Request):
    """Endpoint for Slack Interactivity (Resolved buttons)"""
    return await slack_handler.handle(request)


def _readable(epoch):
    if epoch is None:
        return None
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


@app.get("/scheduled-messages")
async def scheduled_messages():
    """Reminders currently scheduled in the operations channel"""
    try:
        messages = await channel_client.list_scheduled_messages(config.operations_channel)
    except ChannelClientError as e:
        if e.error:
            return JSONResponse({"error": e.error}, status_code=400)
        return JSONResponse({"error": "Internal Server Error", "details": str(e)}, status_code=500)
    except Exception as e:
        logger.error(f"Error fetching scheduled messages: {e}")
        return JSONResponse({"error": "Internal Server Error", "details": str(e)}, status_code=500)

    formatted = [
        {
            "id": msg.get("id"),
            "channel_id": msg.get("channel_id"),
            "post_at": msg.get("post_at"),
            "post_at_readable": _readable(msg.get("post_at")),
            "text": msg.get("text"),
            "blocks": msg.get("blocks"),
            "attachments": msg.get("attachments"),
            "date_created": msg.get("date_created"),
            "date_created_readable": _readable(msg.get("date_created")),
        }
        for msg in messages
    ]
    return {"ok": True, "count": len(formatted), "scheduled_messages": formatted}


@app.get("/test-search")
async def test_search(q: str = None):
    """Run a raw Slack search, for checking week thread lookups"""
    query = q or f'in:#{config.review_channel_name} "ARRIVAL-DEPARTURE"'
    try:
        return await channel_client.search_raw(query, count=10)
    except Exception as e:
        logger.error(f"Error testing Slack search: {e}")
        return JSONResponse({"error": "Internal Server Error", "details": str(e)}, status_code=500)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "services": ["webhook", "slack"]}


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": "Hostbuddy Slack Integration Worker",
        "webhook_endpoints": ["/webhook", "/a008"],
        "slack_endpoints": ["/slack/interactive"],
        "diagnostics": ["/scheduled-messages", "/test-search"],
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
