"""Resolve identities across GitHub and Slack.

A GitHub username is translated to a Slack email through the profile store,
and the email to a Slack user through a cached copy of the Slack directory.
The cache is filled on first use and refreshed at most once per call when a
lookup misses.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from reviewbot.errors import DirectoryFetchFailed, UserNotFound
from reviewbot.profiles.store import FindProfilesInput, ProfileFilter


@dataclass(frozen=True)
class SlackUser:
    id: str
    name: str = ""
    real_name: str = ""
    display_name: str = ""
    email: str = ""
    image_48: str = ""

    @classmethod
    def from_api(cls, member: dict) -> "SlackUser":
        profile = member.get("profile") or {}
        return cls(
            id=member["id"],
            name=member.get("name", ""),
            real_name=member.get("real_name") or profile.get("real_name", ""),
            display_name=profile.get("display_name", ""),
            email=profile.get("email", ""),
            image_48=profile.get("image_48", ""),
        )


class ProfileLookup(Protocol):
    async def find_profiles(self, input: FindProfilesInput) -> list: ...


DirectoryFetcher = Callable[[], Awaitable[list[dict]]]


class AccountResolver:
    def __init__(self, profiles: ProfileLookup, fetch_directory: DirectoryFetcher) -> None:
        self.profiles = profiles
        self._fetch_directory = fetch_directory
        self._lock = asyncio.Lock()
        self._slack_users: list[SlackUser] | None = None

    async def resolve_by_github_username(self, github_user_name: str) -> SlackUser:
        # UserNotFound from the store propagates as is
        profiles = await self.profiles.find_profiles(
            FindProfilesInput(
                limit=1, filter=ProfileFilter(github_user_name=github_user_name)
            )
        )
        if not profiles:
            raise UserNotFound(f"github username={github_user_name}")
        return await self.resolve_by_email(profiles[0].slack_email)

    async def resolve_by_email(self, email: str, force_refresh: bool = False) -> SlackUser:
        async with self._lock:
            refresh = force_refresh
            while True:
                if self._slack_users is None or refresh:
                    await self._refill()
                for user in self._slack_users:
                    if user.email == email:
                        return user
                if refresh:
                    raise UserNotFound(f"slack email={email}")
                refresh = True

    async def invalidate(self) -> None:
        async with self._lock:
            self._slack_users = None

    async def _refill(self) -> None:
        try:
            members = await self._fetch_directory()
        except Exception as exc:
            raise DirectoryFetchFailed(f"failed to fetch slack users: {exc}") from exc
        self._slack_users = [SlackUser.from_api(m) for m in members]
