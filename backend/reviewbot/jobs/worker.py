from functools import partial

import structlog
from arq.connections import RedisSettings

from reviewbot.config import settings
from reviewbot.db.session import async_session_factory, engine
from reviewbot.identity.resolver import AccountResolver
from reviewbot.jobs.tasks import handle_mention, notify_review_requested, notify_review_submitted
from reviewbot.logging_config import configure_logging
from reviewbot.notifications.github import PullRequestNotifier
from reviewbot.notifications.suppressor import DuplicateSuppressor
from reviewbot.profiles.store import ProfileStore
from reviewbot.slack import client as slack_client

log = structlog.get_logger()


async def startup(ctx: dict) -> None:
    configure_logging(settings.log_level)
    token = settings.slack_bot_token

    auth = await slack_client.auth_test(token)
    log.info("slack_authorized", user=auth.get("user"), user_id=auth.get("user_id"))

    channel_id = await slack_client.find_channel_id(
        token, settings.github_pr_notification_channel
    )
    if channel_id is None:
        raise RuntimeError(
            f"github pull request notification channel "
            f"({settings.github_pr_notification_channel}) not found"
        )

    profiles = ProfileStore(async_session_factory)
    resolver = AccountResolver(profiles, partial(slack_client.fetch_directory, token))
    suppressor = DuplicateSuppressor(retention=settings.dedup_retention_seconds)

    ctx["profiles"] = profiles
    ctx["sweeper"] = suppressor.start(settings.dedup_sweep_interval_seconds)
    ctx["notifier"] = PullRequestNotifier(
        token,
        channel_id,
        resolver,
        suppressor,
        review_request_window=settings.review_request_window_seconds,
    )
    log.info("worker_started", notification_channel=channel_id)


async def shutdown(ctx: dict) -> None:
    sweeper = ctx.get("sweeper")
    if sweeper is not None:
        await sweeper.stop()
    await engine.dispose()
    log.info("worker_stopped")


class WorkerSettings:
    functions = [
        handle_mention,
        notify_review_requested,
        notify_review_submitted,
    ]
    on_startup = startup
    on_shutdown = shutdown
    max_jobs = 10
    job_timeout = 60
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
