from datetime import timedelta

import structlog
from pydantic import BaseModel

from reviewbot.errors import UserNotFound
from reviewbot.identity.resolver import AccountResolver
from reviewbot.notifications.suppressor import DuplicateSuppressor
from reviewbot.slack import client as slack_client
from reviewbot.slack.messages import (
    COLOR_GRAY,
    COLOR_GREEN,
    COLOR_RED,
    COLOR_YELLOW,
    EMOJI_MIDDLE_FINGER,
    EMOJI_OK_HAND,
    EMOJI_POINT_RIGHT,
    EMOJI_POINT_UP,
    EMOJI_WRITING_HAND,
    build_attachment,
    field,
    footer_suffix,
    mentionize,
    slack_timestamp,
)

log = structlog.get_logger()

DEFAULT_REVIEW_REQUEST_WINDOW = timedelta(seconds=4)

REVIEW_STATE_STYLES = {
    "commented": (EMOJI_WRITING_HAND, COLOR_GRAY),
    "changes_requested": (EMOJI_POINT_UP, COLOR_YELLOW),
    "approved": (EMOJI_OK_HAND, COLOR_GREEN),
}


class ReviewRequested(BaseModel):
    owner: str
    owner_avatar_url: str = ""
    url: str
    title: str = ""
    body: str = ""
    repo_name: str = ""
    requested_reviewers: list[str] = []


class ReviewSubmitted(BaseModel):
    owner: str
    title: str = ""
    repo_name: str = ""
    reviewer: str
    reviewer_avatar_url: str = ""
    review_body: str = ""
    review_state: str = ""
    review_url: str = ""


class PullRequestNotifier:
    def __init__(
        self,
        token: str,
        channel_id: str,
        resolver: AccountResolver,
        suppressor: DuplicateSuppressor,
        review_request_window: float | timedelta = DEFAULT_REVIEW_REQUEST_WINDOW,
    ) -> None:
        self.token = token
        self.channel_id = channel_id
        self.resolver = resolver
        self.suppressor = suppressor
        self.review_request_window = review_request_window

    async def mention_by_github_username(self, name: str) -> str:
        try:
            user = await self.resolver.resolve_by_github_username(name)
        except UserNotFound:
            log.info("slack_user_unresolved", github_user_name=name)
            return f"<@{name}> (could not resolve slack user by github user name)"
        except Exception as exc:
            log.warning("slack_user_resolve_failed", github_user_name=name, error=str(exc))
            return f"<@{name}> ({exc})"
        return mentionize(user.id)

    async def review_requested_attachment(self, msg: ReviewRequested) -> dict:
        mentions = [await self.mention_by_github_username(r) for r in msg.requested_reviewers]
        return build_attachment(
            color=COLOR_GREEN,
            fallback="pull request review requested message",
            pretext=f"{EMOJI_POINT_RIGHT} {' '.join(mentions)} your review is requested",
            author_name=msg.owner,
            author_icon=msg.owner_avatar_url,
            title=msg.title,
            title_link=msg.url,
            text=msg.body,
            footer="Github webhook " + footer_suffix(),
            ts=slack_timestamp(),
            fields=[field("Repository", msg.repo_name, short=True)],
        )

    async def review_submitted_attachment(self, msg: ReviewSubmitted) -> dict:
        emoji, color = REVIEW_STATE_STYLES.get(
            msg.review_state.lower(), (EMOJI_MIDDLE_FINGER, COLOR_RED)
        )
        mention = await self.mention_by_github_username(msg.owner)
        return build_attachment(
            color=color,
            fallback="pull request review submitted",
            pretext=f"{emoji} {mention} your PR *{msg.review_state}*",
            author_name=msg.reviewer,
            author_icon=msg.reviewer_avatar_url,
            title=f"PR ({msg.title}) review",
            title_link=msg.review_url,
            text=msg.review_body,
            footer="Github webhook " + footer_suffix(),
            ts=slack_timestamp(),
            fields=[field("Repository", msg.repo_name, short=True)],
        )

    async def notify_review_requested(self, msg: ReviewRequested) -> bool:
        # GitHub sends one delivery per requested reviewer, all for the same PR
        if not await self.suppressor.should_notify(msg.url, self.review_request_window):
            log.info("review_requested_duplicate_suppressed", url=msg.url)
            return False
        attachment = await self.review_requested_attachment(msg)
        await self._post(attachment)
        return True

    async def notify_review_submitted(self, msg: ReviewSubmitted) -> bool:
        if msg.owner == msg.reviewer:
            log.info(
                "review_submitted_self_comment_ignored",
                pr_owner=msg.owner,
                reviewer=msg.reviewer,
            )
            return False
        attachment = await self.review_submitted_attachment(msg)
        await self._post(attachment)
        return True

    async def _post(self, attachment: dict) -> None:
        resp = await slack_client.post_message(
            self.token, self.channel_id, attachments=[attachment]
        )
        if not resp.get("ok"):
            log.error("github_notification_post_failed", error=resp.get("error"))
