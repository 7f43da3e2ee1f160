import json

import structlog
from fastapi import Request, Response

from reviewbot.config import settings
from reviewbot.github import router
from reviewbot.github.verify import verify_github_signature
from reviewbot.notifications.github import ReviewRequested, ReviewSubmitted

log = structlog.get_logger()


def review_requested_from_payload(payload: dict) -> ReviewRequested:
    pr = payload.get("pull_request") or {}
    user = pr.get("user") or {}
    return ReviewRequested(
        owner=user.get("login", ""),
        owner_avatar_url=user.get("avatar_url") or "",
        # "url" points at the api resource
        url=pr.get("html_url", ""),
        title=pr.get("title") or "",
        body=pr.get("body") or "",
        repo_name=(payload.get("repository") or {}).get("name", ""),
        requested_reviewers=[r.get("login", "") for r in pr.get("requested_reviewers") or []],
    )


def review_submitted_from_payload(payload: dict) -> ReviewSubmitted:
    pr = payload.get("pull_request") or {}
    review = payload.get("review") or {}
    reviewer = review.get("user") or {}
    return ReviewSubmitted(
        owner=(pr.get("user") or {}).get("login", ""),
        title=pr.get("title") or "",
        repo_name=(payload.get("repository") or {}).get("name", ""),
        reviewer=reviewer.get("login", ""),
        reviewer_avatar_url=reviewer.get("avatar_url") or "",
        review_body=review.get("body") or "",
        review_state=review.get("state") or "",
        review_url=review.get("html_url") or "",
    )


@router.post("/webhook")
async def github_webhook(request: Request) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256", "")

    if settings.github_webhook_secret and not verify_github_signature(
        settings.github_webhook_secret, body, signature
    ):
        return Response(status_code=401)

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        log.error("github_invalid_payload")
        return Response(status_code=400)

    event = request.headers.get("X-GitHub-Event", "")
    action = payload.get("action", "")
    arq_pool = request.app.state.arq_pool

    if event == "pull_request" and action == "review_requested":
        log.info("github_event", event=event, action=action)
        msg = review_requested_from_payload(payload)
        await arq_pool.enqueue_job("notify_review_requested", msg.model_dump())
    elif event == "pull_request_review" and action == "submitted":
        log.info("github_event", event=event, action=action)
        msg = review_submitted_from_payload(payload)
        await arq_pool.enqueue_job("notify_review_submitted", msg.model_dump())
    else:
        log.info("github_event_ignored", event=event, action=action)

    return Response(status_code=200)
