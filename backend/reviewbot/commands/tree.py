"""Command tree for ``@reviewbot`` mentions.

A fresh parser tree is built for every mention so concurrent invocations never
share parse state.
"""

import argparse
from dataclasses import dataclass

import structlog

from reviewbot.commands import system, users
from reviewbot.profiles.store import ProfileStore
from reviewbot.slack.reply import SlackReply

log = structlog.get_logger()

BOT_NAME = "reviewbot"


class CommandUsageError(Exception):
    def __init__(self, parser: argparse.ArgumentParser, message: str) -> None:
        self.parser = parser
        super().__init__(message)


class CommandParser(argparse.ArgumentParser):
    def __init__(self, *args, **kwargs) -> None:
        kwargs.setdefault("add_help", False)
        super().__init__(*args, **kwargs)
        self.add_argument("--help", "-h", action="store_true", help="print help")
        self.set_defaults(handler=None, parser=self)

    def error(self, message: str):
        raise CommandUsageError(self, message)

    def exit(self, status: int = 0, message: str | None = None):
        raise CommandUsageError(self, message or "")


@dataclass
class CommandContext:
    reply: SlackReply
    profiles: ProfileStore


def _group(parent, name: str, description: str, aliases: list[str] | None = None):
    parser = parent.add_parser(
        name, aliases=aliases or [], help=description, description=description
    )
    return parser, parser.add_subparsers(title="commands", metavar="<COMMAND>")


def build_parser() -> CommandParser:
    root = CommandParser(
        prog=f"@{BOT_NAME}",
        description="slack bot bridging github and slack",
        usage=f"@{BOT_NAME} <COMMAND> <OPTIONS> <ARGS>",
    )
    commands = root.add_subparsers(
        title="commands", metavar="<COMMAND>", parser_class=CommandParser
    )

    cmd = commands.add_parser("version", help="print version")
    cmd.set_defaults(handler=system.run_version)

    cmd = commands.add_parser("uptime", help="print uptime")
    cmd.set_defaults(handler=system.run_uptime)

    cmd = commands.add_parser("help", help="print help")
    cmd.set_defaults(handler=None, parser=root)

    _, add = _group(commands, "add", "add resource", aliases=["create"])
    cmd = add.add_parser(
        "user",
        help="add user",
        description="add user",
        epilog='example: @reviewbot add user {"github": {"user_name": "octocat"}, '
        '"slack": {"email": "octocat@example.com"}}',
    )
    cmd.add_argument("profile", nargs="*", help="user json")
    cmd.set_defaults(handler=users.run_add_user)

    _, ls = _group(commands, "ls", "ls resources", aliases=["list", "find", "search"])
    cmd = ls.add_parser(
        "user",
        aliases=["users"],
        help="ls users",
        description="ls users",
        epilog="example: @reviewbot ls users --format=email={slack_email}/deleted={deleted_at}",
    )
    cmd.add_argument("filter", nargs="*", help="filter user json")
    cmd.add_argument("--limit", type=int, default=0, help="user limit")
    cmd.add_argument("--all", action="store_true", help="include soft deleted users")
    cmd.add_argument("--format", default="", help="python format string over user fields")
    cmd.add_argument("--verbose", "-v", action="store_true", help="show full user information")
    cmd.set_defaults(handler=users.run_ls_users)

    _, update = _group(commands, "update", "update resource")
    cmd = update.add_parser(
        "user",
        help="update user",
        description="update user",
        epilog='example: @reviewbot update user octocat {"slack": {"email": "new@example.com"}}',
    )
    cmd.add_argument("github_user_name", nargs="?", help="github user name")
    cmd.add_argument("changes", nargs="*", help="update json")
    cmd.set_defaults(handler=users.run_update_user)

    _, remove = _group(commands, "delete", "delete resource", aliases=["remove"])
    cmd = remove.add_parser(
        "user",
        aliases=["users"],
        help="delete user",
        description="delete user",
        epilog='example: @reviewbot delete user {"github": {"user_name": "octocat"}}',
    )
    cmd.add_argument("filter", nargs="*", help="filter user json")
    cmd.add_argument("--all", action="store_true", help="enable all delete")
    cmd.add_argument("--hard", action="store_true", help="enable hard delete")
    cmd.set_defaults(handler=users.run_delete_user)

    return root


def read_args(text: str) -> list[str]:
    args = text.split()
    # "@reviewbot ls" arrives as "<@U0123ABCD> ls"
    if args and args[0].startswith("<@"):
        args = args[1:]
    return args


async def execute(text: str, ctx: CommandContext) -> None:
    root = build_parser()
    argv = read_args(text)
    try:
        args = root.parse_args(argv)
    except CommandUsageError as exc:
        message = f"{exc}\n\n" if str(exc) else ""
        await ctx.reply.write_literal(message + exc.parser.format_help())
        return

    if args.help or args.handler is None:
        await ctx.reply.write_literal(args.parser.format_help())
        return

    log.info("command_execute", argv=argv, handler=args.handler.__name__)
    try:
        await args.handler(args, ctx)
    except Exception as exc:
        log.warning("command_failed", argv=argv, error=str(exc))
        await ctx.reply.fail(exc)
