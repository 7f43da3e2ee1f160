import pytest

from reviewbot.commands.tree import CommandContext, build_parser, execute, read_args
from reviewbot.config import VERSION
from reviewbot.errors import ProfileValidationError
from reviewbot.profiles.store import FindProfilesInput

ADD_OCTOCAT = (
    '<@UBOT> add user {"github": {"user_name": "octocat"}, '
    '"slack": {"email": "octo@example.com"}}'
)


@pytest.fixture
def ctx(reply, profile_store) -> CommandContext:
    return CommandContext(reply=reply, profiles=profile_store)


def test_read_args_drops_leading_mention():
    assert read_args("<@U0123ABCD>  ls   users --limit 2") == ["ls", "users", "--limit", "2"]
    assert read_args("ls users") == ["ls", "users"]
    assert read_args("") == []


def test_parser_supports_aliases():
    args = build_parser().parse_args(["search", "users", "--all"])
    assert args.handler.__name__ == "run_ls_users"
    assert args.all is True


@pytest.mark.asyncio
async def test_version(ctx, reply):
    await execute("<@UBOT> version", ctx)
    assert reply.texts == [f"`{VERSION}`"]


@pytest.mark.asyncio
async def test_uptime(ctx, reply):
    await execute("<@UBOT> uptime", ctx)
    assert reply.texts[0].startswith("`") and reply.texts[0].endswith("`")


@pytest.mark.asyncio
async def test_bare_mention_prints_help(ctx, reply):
    await execute("<@UBOT>", ctx)
    assert "@reviewbot <COMMAND> <OPTIONS> <ARGS>" in reply.texts[0]


@pytest.mark.asyncio
async def test_group_without_subcommand_prints_its_help(ctx, reply):
    await execute("<@UBOT> ls", ctx)
    assert "ls resources" in reply.texts[0]


@pytest.mark.asyncio
async def test_unknown_command_prints_error_and_help(ctx, reply):
    await execute("<@UBOT> dance", ctx)
    assert "invalid choice" in reply.texts[0]


@pytest.mark.asyncio
async def test_subcommand_help_flag(ctx, reply):
    await execute("<@UBOT> delete user --help", ctx)
    assert "--hard" in reply.texts[0]


@pytest.mark.asyncio
async def test_add_user(ctx, reply, profile_store):
    await execute(ADD_OCTOCAT, ctx)

    assert reply.failures == []
    attachment = reply.attachments[0]
    assert attachment["pretext"] == ":ok_hand: user successfully added"
    assert attachment["author_name"] == "alice"
    assert "octo@example.com" in attachment["text"]
    found = await profile_store.find_profiles(FindProfilesInput())
    assert [p.github_user_name for p in found] == ["octocat"]


@pytest.mark.asyncio
async def test_add_user_without_args_prints_help(ctx, reply):
    await execute("<@UBOT> add user", ctx)
    assert reply.attachments == []
    assert "user json" in reply.texts[0]


@pytest.mark.asyncio
async def test_add_invalid_user_fails(ctx, reply):
    await execute('<@UBOT> add user {"github": {"user_name": "octocat"}}', ctx)

    assert reply.attachments == []
    assert isinstance(reply.failures[0], ProfileValidationError)


@pytest.mark.asyncio
async def test_ls_users_default_format(ctx, reply):
    await execute(ADD_OCTOCAT, ctx)

    await execute("<@UBOT> ls users", ctx)

    fields = reply.attachments[-1]["fields"]
    assert fields == [{"title": "octocat", "value": "email=octo@example.com", "short": False}]


@pytest.mark.asyncio
async def test_ls_users_custom_format(ctx, reply):
    await execute(ADD_OCTOCAT, ctx)

    await execute("<@UBOT> ls users --format=user={github_user_name}", ctx)

    assert reply.attachments[-1]["fields"][0]["value"] == "user=octocat"


@pytest.mark.asyncio
async def test_ls_users_empty(ctx, reply):
    await execute("<@UBOT> ls users", ctx)

    attachment = reply.attachments[0]
    assert attachment["fields"] == []
    assert attachment["text"] == "user not found"


@pytest.mark.asyncio
async def test_update_user(ctx, reply, profile_store):
    await execute(ADD_OCTOCAT, ctx)

    await execute('<@UBOT> update user octocat {"slack": {"email": "new@example.com"}}', ctx)

    assert reply.attachments[-1]["pretext"] == ":ok_hand: user successfully updated"
    found = await profile_store.find_profiles(FindProfilesInput())
    assert found[0].slack_email == "new@example.com"


@pytest.mark.asyncio
async def test_delete_user_soft_then_hard(ctx, reply):
    await execute(ADD_OCTOCAT, ctx)

    await execute('<@UBOT> delete user {"github": {"user_name": "octocat"}}', ctx)
    assert reply.attachments[-1]["text"] == "1 user(s) soft deleted"

    await execute('<@UBOT> remove users {"github": {"user_name": "octocat"}} --hard', ctx)
    assert reply.attachments[-1]["text"] == "1 user(s) hard deleted"


@pytest.mark.asyncio
async def test_delete_without_filter_is_refused(ctx, reply):
    await execute("<@UBOT> delete user", ctx)
    assert "--all" in str(reply.failures[0])
