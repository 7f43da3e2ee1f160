import json
from datetime import datetime

from pydantic import BaseModel, ValidationError

from reviewbot.errors import ProfileValidationError

# Slack turns typed quotes into typographic ones and code spans into backticks.
_USER_INPUT_REPLACEMENTS = str.maketrans(
    {"”": '"', "“": '"', "‘": '"', "’": '"', "`": None}
)


class GithubProfile(BaseModel):
    user_name: str = ""


class SlackProfile(BaseModel):
    email: str = ""


class ProfileIn(BaseModel):
    github: GithubProfile = GithubProfile()
    slack: SlackProfile = SlackProfile()

    def validate_complete(self) -> None:
        if not self.github.user_name:
            raise ProfileValidationError("github.user_name required")
        if not self.slack.email:
            raise ProfileValidationError("slack.email required")
        # TODO replace with an RFC 5322 aware check, e.g. email-validator
        if "@" not in self.slack.email:
            raise ProfileValidationError("invalid email address")

    def merge(self, other: "ProfileIn") -> "ProfileIn":
        return ProfileIn(
            github=GithubProfile(user_name=other.github.user_name or self.github.user_name),
            slack=SlackProfile(email=other.slack.email or self.slack.email),
        )


class ProfileOut(BaseModel):
    github_user_name: str
    slack_email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def as_input(self) -> ProfileIn:
        return ProfileIn(
            github=GithubProfile(user_name=self.github_user_name),
            slack=SlackProfile(email=self.slack_email),
        )

    def pretty(self) -> str:
        return self.model_dump_json(indent=4)


def sanitize_email(email: str) -> str:
    """Undo Slack's link rewriting: ``<mailto:a@b.c|a@b.c>`` -> ``a@b.c``."""
    if email.startswith("<mailto:") and "|" in email:
        return email[email.index("|") + 1 : -1]
    return email


def read_profile_from_slack_input(text: str) -> ProfileIn:
    replaced = text.translate(_USER_INPUT_REPLACEMENTS)
    try:
        profile = ProfileIn.model_validate(json.loads(replaced))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ProfileValidationError(f"failed to parse json. input: {replaced}") from exc
    profile.slack.email = sanitize_email(profile.slack.email)
    return profile


def read_profile_from_args(args: list[str]) -> ProfileIn:
    return read_profile_from_slack_input("".join(args))
