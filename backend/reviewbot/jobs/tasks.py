import structlog

from reviewbot.commands.tree import CommandContext, execute
from reviewbot.config import settings
from reviewbot.notifications.github import (
    PullRequestNotifier,
    ReviewRequested,
    ReviewSubmitted,
)
from reviewbot.slack import client as slack_client
from reviewbot.slack.reply import SlackReply

log = structlog.get_logger()


async def handle_mention(ctx: dict, event: dict) -> None:
    token = settings.slack_bot_token
    user_resp = await slack_client.users_info(token, event["user"])
    if not user_resp.get("ok"):
        log.warning("mention_user_lookup_failed", user=event["user"], error=user_resp.get("error"))
        return

    reply = SlackReply(token, event["channel"], user=user_resp.get("user"))
    await execute(event["text"], CommandContext(reply=reply, profiles=ctx["profiles"]))


async def notify_review_requested(ctx: dict, message: dict) -> bool:
    notifier: PullRequestNotifier = ctx["notifier"]
    return await notifier.notify_review_requested(ReviewRequested.model_validate(message))


async def notify_review_submitted(ctx: dict, message: dict) -> bool:
    notifier: PullRequestNotifier = ctx["notifier"]
    return await notifier.notify_review_submitted(ReviewSubmitted.model_validate(message))
