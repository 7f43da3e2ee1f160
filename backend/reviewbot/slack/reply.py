import structlog

from reviewbot.slack import client as slack_client
from reviewbot.slack.messages import footer_suffix, literalize, slack_timestamp

log = structlog.get_logger()


class SlackReply:
    """Posts replies to the channel a mention came from. Post failures are logged, not raised."""

    def __init__(self, token: str, channel: str, user: dict | None = None) -> None:
        self.token = token
        self.channel = channel
        self.user = user or {}

    @property
    def author_name(self) -> str:
        profile = self.user.get("profile") or {}
        return profile.get("display_name") or self.user.get("name", "")

    @property
    def author_icon(self) -> str:
        return (self.user.get("profile") or {}).get("image_48", "")

    async def write(self, text: str) -> None:
        await self._post(text=text)

    async def write_literal(self, text: str) -> None:
        await self._post(text=literalize(text))

    async def post_attachment(self, attachment: dict) -> None:
        attachment = dict(attachment)
        attachment.setdefault("ts", slack_timestamp())
        attachment["footer"] = attachment.get("footer", "") + footer_suffix()
        await self._post(attachments=[attachment])

    async def fail(self, exc: BaseException) -> None:
        await self._post(text=literalize(f"{type(exc).__name__}: {exc}"))

    async def _post(self, **kwargs) -> None:
        try:
            resp = await slack_client.post_message(self.token, self.channel, **kwargs)
        except Exception as exc:
            log.warning("slack_reply_failed", channel=self.channel, error=str(exc))
            return
        if not resp.get("ok"):
            log.warning("slack_reply_failed", channel=self.channel, error=resp.get("error"))
