from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reviewbot import clock
from reviewbot.db.models import Profile
from reviewbot.errors import ProfileValidationError, UnsafeDeletion, UserNotFound
from reviewbot.profiles.schemas import ProfileIn, ProfileOut

log = structlog.get_logger()


@dataclass
class ProfileFilter:
    github_user_name: str = ""
    slack_email: str = ""

    @classmethod
    def from_profile(cls, profile: ProfileIn) -> "ProfileFilter":
        return cls(github_user_name=profile.github.user_name, slack_email=profile.slack.email)

    def conditions(self) -> list:
        conditions = []
        if self.github_user_name:
            conditions.append(Profile.github_user_name == self.github_user_name)
        if self.slack_email:
            conditions.append(Profile.slack_email == self.slack_email)
        return conditions


@dataclass
class FindProfilesInput:
    limit: int = 0
    filter: ProfileFilter | None = None
    include_deleted: bool = False


@dataclass
class DeleteProfilesInput:
    filter: ProfileFilter | None = None
    all: bool = False
    hard: bool = False


@dataclass
class DeleteProfilesOutput:
    soft_deleted_count: int = 0
    hard_deleted_count: int = 0


def _in_time_zone(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(clock.TIME_ZONE)


def _to_out(profile: Profile) -> ProfileOut:
    out = ProfileOut.model_validate(profile)
    out.created_at = _in_time_zone(out.created_at)
    out.updated_at = _in_time_zone(out.updated_at)
    out.deleted_at = _in_time_zone(out.deleted_at)
    return out


class ProfileStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        now: Callable[[], datetime] = clock.now,
    ) -> None:
        self.session_factory = session_factory
        self.now = now

    async def add_profile(self, profile: ProfileIn) -> ProfileOut:
        now = self._utcnow()
        async with self.session_factory() as session:
            row = (
                await session.execute(
                    select(Profile).where(Profile.github_user_name == profile.github.user_name)
                )
            ).scalar_one_or_none()
            if row is not None and row.deleted_at is None:
                raise ProfileValidationError(
                    f"github user {profile.github.user_name} already registered"
                )

            if row is None:
                row = Profile(github_user_name=profile.github.user_name)
                session.add(row)
            # a soft deleted profile is registered again in place
            row.slack_email = profile.slack.email
            row.created_at = now
            row.updated_at = now
            row.deleted_at = None
            await session.commit()
            log.debug("profile_added", github_user_name=row.github_user_name)
            return _to_out(row)

    async def update_profile(self, github_user_name: str, changes: ProfileIn) -> ProfileOut:
        async with self.session_factory() as session:
            row = (
                await session.execute(
                    select(Profile).where(
                        Profile.github_user_name == github_user_name,
                        Profile.deleted_at.is_(None),
                    )
                )
            ).scalar_one_or_none()
            if row is None:
                raise UserNotFound(f"github username={github_user_name}")

            merged = _to_out(row).as_input().merge(changes)
            merged.validate_complete()
            if merged.github.user_name != github_user_name:
                taken = (
                    await session.execute(
                        select(Profile.id).where(
                            Profile.github_user_name == merged.github.user_name
                        )
                    )
                ).scalar_one_or_none()
                if taken is not None:
                    raise ProfileValidationError(
                        f"github user {merged.github.user_name} already registered"
                    )
            row.github_user_name = merged.github.user_name
            row.slack_email = merged.slack.email
            row.updated_at = self._utcnow()
            await session.commit()
            log.debug("profile_updated", github_user_name=row.github_user_name)
            return _to_out(row)

    async def find_profiles(self, input: FindProfilesInput) -> list[ProfileOut]:
        stmt = select(Profile).order_by(Profile.github_user_name)
        if input.filter is not None:
            stmt = stmt.where(*input.filter.conditions())
        if not input.include_deleted:
            stmt = stmt.where(Profile.deleted_at.is_(None))
        if input.limit > 0:
            stmt = stmt.limit(input.limit)

        async with self.session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()

        if not rows:
            raise UserNotFound()
        return [_to_out(row) for row in rows]

    async def delete_profiles(self, input: DeleteProfilesInput) -> DeleteProfilesOutput:
        conditions = input.filter.conditions() if input.filter is not None else []
        if not conditions and not input.all:
            raise UnsafeDeletion()

        async with self.session_factory() as session:
            if input.hard:
                result = await session.execute(delete(Profile).where(*conditions))
                await session.commit()
                log.info("profiles_hard_deleted", count=result.rowcount)
                return DeleteProfilesOutput(hard_deleted_count=result.rowcount)

            result = await session.execute(
                update(Profile)
                .where(Profile.deleted_at.is_(None), *conditions)
                .values(deleted_at=self._utcnow())
            )
            await session.commit()
            log.info("profiles_soft_deleted", count=result.rowcount)
            return DeleteProfilesOutput(soft_deleted_count=result.rowcount)

    def _utcnow(self) -> datetime:
        # stored as UTC, converted back to the display time zone on read
        return self.now().astimezone(timezone.utc)
