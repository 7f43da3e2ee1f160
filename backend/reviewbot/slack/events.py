import json

import structlog
from fastapi import Request, Response

from reviewbot.config import settings
from reviewbot.slack import router
from reviewbot.slack.verify import verify_slack_signature

log = structlog.get_logger()


@router.post("/events")
async def slack_events(request: Request) -> Response:
    body = await request.body()
    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    if settings.slack_signing_secret and not verify_slack_signature(
        settings.slack_signing_secret, timestamp, body, signature
    ):
        return Response(status_code=401)

    payload = json.loads(body)

    if payload.get("type") == "url_verification":
        return Response(
            content=json.dumps({"challenge": payload["challenge"]}),
            media_type="application/json",
        )

    # Slack redelivers when we are slow to ack; the first delivery was enqueued
    if request.headers.get("X-Slack-Retry-Num"):
        log.info("slack_retry_skipped", retry_num=request.headers.get("X-Slack-Retry-Num"))
        return Response(status_code=200)

    event = payload.get("event", {})
    if event.get("type") != "app_mention":
        log.debug("slack_event_ignored", type=event.get("type"))
        return Response(status_code=200)

    if event.get("bot_id") or event.get("subtype") == "bot_message":
        log.debug("slack_bot_message_ignored", bot_id=event.get("bot_id"))
        return Response(status_code=200)

    log.info(
        "slack_mention",
        channel=event.get("channel"),
        user=event.get("user"),
        ts=event.get("ts"),
    )
    arq_pool = request.app.state.arq_pool
    await arq_pool.enqueue_job(
        "handle_mention",
        {
            "channel": event.get("channel", ""),
            "user": event.get("user", ""),
            "text": event.get("text", ""),
            "ts": event.get("ts", ""),
        },
    )
    return Response(status_code=200)
