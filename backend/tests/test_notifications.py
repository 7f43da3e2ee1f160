from unittest.mock import AsyncMock, patch

import pytest

from reviewbot.errors import DirectoryFetchFailed, UserNotFound
from reviewbot.identity.resolver import SlackUser
from reviewbot.notifications.github import (
    PullRequestNotifier,
    ReviewRequested,
    ReviewSubmitted,
)
from reviewbot.notifications.suppressor import DuplicateSuppressor


class FakeResolver:
    def __init__(self, users: dict[str, str], error: Exception | None = None) -> None:
        self.users = users
        self.error = error

    async def resolve_by_github_username(self, name: str) -> SlackUser:
        if self.error is not None:
            raise self.error
        if name not in self.users:
            raise UserNotFound(name)
        return SlackUser(id=self.users[name])


def review_requested(**overrides) -> ReviewRequested:
    data = {
        "owner": "octocat",
        "url": "https://github.com/acme/api/pull/42",
        "title": "Add retries",
        "repo_name": "api",
        "requested_reviewers": ["alice-gh", "bob-gh"],
    }
    data.update(overrides)
    return ReviewRequested(**data)


def review_submitted(**overrides) -> ReviewSubmitted:
    data = {
        "owner": "octocat",
        "title": "Add retries",
        "repo_name": "api",
        "reviewer": "alice-gh",
        "review_state": "approved",
        "review_url": "https://github.com/acme/api/pull/42#pullrequestreview-1",
    }
    data.update(overrides)
    return ReviewSubmitted(**data)


@pytest.fixture
def notifier(fake_clock) -> PullRequestNotifier:
    return PullRequestNotifier(
        "xoxb-test",
        "C123",
        FakeResolver({"alice-gh": "UALICE", "bob-gh": "UBOB", "octocat": "UOCTO"}),
        DuplicateSuppressor(clock=fake_clock),
    )


@pytest.mark.asyncio
async def test_mention_resolved_user(notifier):
    assert await notifier.mention_by_github_username("alice-gh") == "<@UALICE>"


@pytest.mark.asyncio
async def test_mention_unresolved_user_falls_back_to_github_name(notifier):
    mention = await notifier.mention_by_github_username("ghost")
    assert mention == "<@ghost> (could not resolve slack user by github user name)"


@pytest.mark.asyncio
async def test_mention_directory_failure_shows_error():
    notifier = PullRequestNotifier(
        "xoxb-test",
        "C123",
        FakeResolver({}, error=DirectoryFetchFailed("slack down")),
        DuplicateSuppressor(),
    )
    assert await notifier.mention_by_github_username("alice-gh") == "<@alice-gh> (slack down)"


@pytest.mark.asyncio
async def test_review_requested_posts_once_per_window(notifier, fake_clock):
    post = AsyncMock(return_value={"ok": True})
    with patch("reviewbot.notifications.github.slack_client.post_message", post):
        assert await notifier.notify_review_requested(review_requested()) is True
        assert await notifier.notify_review_requested(review_requested()) is False
        fake_clock.advance(5)
        assert await notifier.notify_review_requested(review_requested()) is True

    assert post.await_count == 2
    args, kwargs = post.await_args
    assert args == ("xoxb-test", "C123")
    attachment = kwargs["attachments"][0]
    assert attachment["pretext"] == ":point_right: <@UALICE> <@UBOB> your review is requested"
    assert attachment["title_link"] == "https://github.com/acme/api/pull/42"
    assert attachment["fields"] == [{"title": "Repository", "value": "api", "short": True}]


@pytest.mark.asyncio
async def test_different_pull_requests_are_not_suppressed(notifier):
    post = AsyncMock(return_value={"ok": True})
    with patch("reviewbot.notifications.github.slack_client.post_message", post):
        await notifier.notify_review_requested(review_requested())
        await notifier.notify_review_requested(
            review_requested(url="https://github.com/acme/api/pull/43")
        )

    assert post.await_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "state, emoji, color",
    [
        ("approved", ":ok_hand:", "#2cbe4e"),
        ("commented", ":writing_hand:", "#586069"),
        ("CHANGES_REQUESTED", ":point_up:", "#dbab09"),
        ("dismissed", ":middle_finger:", "#cb2431"),
    ],
)
async def test_review_submitted_style(notifier, state, emoji, color):
    attachment = await notifier.review_submitted_attachment(review_submitted(review_state=state))

    assert attachment["color"] == color
    assert attachment["pretext"] == f"{emoji} <@UOCTO> your PR *{state}*"
    assert attachment["title"] == "PR (Add retries) review"


@pytest.mark.asyncio
async def test_review_submitted_ignores_self_review(notifier):
    post = AsyncMock(return_value={"ok": True})
    with patch("reviewbot.notifications.github.slack_client.post_message", post):
        sent = await notifier.notify_review_submitted(review_submitted(reviewer="octocat"))

    assert sent is False
    post.assert_not_awaited()


@pytest.mark.asyncio
async def test_review_submitted_posts(notifier):
    post = AsyncMock(return_value={"ok": True})
    with patch("reviewbot.notifications.github.slack_client.post_message", post):
        sent = await notifier.notify_review_submitted(review_submitted())

    assert sent is True
    post.assert_awaited_once()
