import time

from reviewbot.config import VERSION

COLOR_GREEN = "#2cbe4e"
COLOR_GRAY = "#586069"
COLOR_YELLOW = "#dbab09"
COLOR_RED = "#cb2431"

EMOJI_OK_HAND = ":ok_hand:"
EMOJI_WRITING_HAND = ":writing_hand:"
EMOJI_POINT_UP = ":point_up:"
EMOJI_POINT_RIGHT = ":point_right:"
EMOJI_MIDDLE_FINGER = ":middle_finger:"


def literalize(text: str) -> str:
    return "```\n" + text + "```\n"


def literalize_line(line: str) -> str:
    return "`" + line + "`"


def mentionize(slack_user_id: str) -> str:
    return f"<@{slack_user_id}>"


def footer_suffix() -> str:
    return f"({VERSION})"


def slack_timestamp() -> int:
    return int(time.time())


def field(title: str, value: str, short: bool = False) -> dict:
    return {"title": title, "value": value, "short": short}


def build_attachment(
    *,
    color: str = COLOR_GREEN,
    fallback: str | None = None,
    pretext: str | None = None,
    author_name: str | None = None,
    author_icon: str | None = None,
    title: str | None = None,
    title_link: str | None = None,
    text: str | None = None,
    footer: str | None = None,
    fields: list[dict] | None = None,
    ts: int | None = None,
) -> dict:
    attachment: dict = {"color": color}
    optional = {
        "fallback": fallback,
        "pretext": pretext,
        "author_name": author_name,
        "author_icon": author_icon,
        "title": title,
        "title_link": title_link,
        "text": text,
        "footer": footer,
        "fields": fields,
        "ts": ts,
    }
    attachment.update({k: v for k, v in optional.items() if v is not None})
    return attachment
