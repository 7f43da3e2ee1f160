import asyncio

import httpx
import structlog

log = structlog.get_logger()

SLACK_API = "https://slack.com/api"
PAGE_LIMIT = 200


class SlackAPIError(Exception):
    def __init__(self, method: str, error: str | None) -> None:
        self.method = method
        self.error = error
        super().__init__(f"slack api {method} failed: {error}")


async def _request(
    method: str,
    token: str,
    *,
    json: dict | None = None,
    params: dict | None = None,
    max_retries: int = 3,
) -> dict:
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{SLACK_API}/{method}"
    for attempt in range(max_retries):
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(url, headers=headers, json=json, params=params)
        if resp.status_code == 429:
            retry_after = int(resp.headers.get("Retry-After", 1))
            log.warning("slack_rate_limited", method=method, retry_after=retry_after)
            await asyncio.sleep(retry_after)
            continue
        data = resp.json()
        if not data.get("ok"):
            log.error("slack_api_error", method=method, error=data.get("error"))
        return data
    return {"ok": False, "error": "max_retries_exceeded"}


async def _request_ok(method: str, token: str, **kwargs) -> dict:
    data = await _request(method, token, **kwargs)
    if not data.get("ok"):
        raise SlackAPIError(method, data.get("error"))
    return data


async def post_message(
    token: str,
    channel: str,
    text: str | None = None,
    attachments: list[dict] | None = None,
) -> dict:
    payload: dict = {"channel": channel}
    if text is not None:
        payload["text"] = text
    if attachments is not None:
        payload["attachments"] = attachments
    return await _request("chat.postMessage", token, json=payload)


async def auth_test(token: str) -> dict:
    return await _request_ok("auth.test", token)


async def users_info(token: str, user_id: str) -> dict:
    return await _request("users.info", token, params={"user": user_id})


async def users_list(token: str, cursor: str | None = None, limit: int = PAGE_LIMIT) -> dict:
    params: dict = {"limit": limit}
    if cursor:
        params["cursor"] = cursor
    return await _request_ok("users.list", token, params=params)


async def conversations_list(
    token: str, cursor: str | None = None, limit: int = PAGE_LIMIT
) -> dict:
    params: dict = {
        "limit": limit,
        "exclude_archived": "true",
        "types": "public_channel,private_channel",
    }
    if cursor:
        params["cursor"] = cursor
    return await _request_ok("conversations.list", token, params=params)


async def fetch_directory(token: str) -> list[dict]:
    """Return every member of the workspace, following ``users.list`` cursors."""
    members: list[dict] = []
    cursor = None
    while True:
        data = await users_list(token, cursor=cursor)
        members.extend(data.get("members", []))
        cursor = (data.get("response_metadata") or {}).get("next_cursor")
        if not cursor:
            return members


async def find_channel_id(token: str, name: str) -> str | None:
    name = name.lstrip("#")
    cursor = None
    while True:
        data = await conversations_list(token, cursor=cursor)
        for channel in data.get("channels", []):
            if channel.get("name") == name:
                return channel["id"]
        cursor = (data.get("response_metadata") or {}).get("next_cursor")
        if not cursor:
            return None
