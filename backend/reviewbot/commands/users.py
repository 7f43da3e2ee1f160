import argparse

from reviewbot.errors import UserNotFound
from reviewbot.profiles.schemas import ProfileOut, read_profile_from_args
from reviewbot.profiles.store import DeleteProfilesInput, FindProfilesInput, ProfileFilter
from reviewbot.slack.messages import (
    COLOR_GREEN,
    EMOJI_OK_HAND,
    build_attachment,
    field,
    literalize,
)

DEFAULT_LS_FORMAT = "email={slack_email}"


async def run_add_user(args: argparse.Namespace, ctx) -> None:
    if not args.profile:
        await ctx.reply.write_literal(args.parser.format_help())
        return

    profile = read_profile_from_args(args.profile)
    profile.validate_complete()
    added = await ctx.profiles.add_profile(profile)

    text = "user successfully added"
    await ctx.reply.post_attachment(
        build_attachment(
            color=COLOR_GREEN,
            fallback=text,
            pretext=f"{EMOJI_OK_HAND} {text}",
            author_name=ctx.reply.author_name,
            author_icon=ctx.reply.author_icon,
            title="user profile",
            text=literalize(added.pretty()),
        )
    )


def render_profile(profile: ProfileOut, fmt: str, verbose: bool) -> str:
    if verbose:
        return literalize(profile.pretty())
    return (fmt or DEFAULT_LS_FORMAT).format(**profile.model_dump())


async def run_ls_users(args: argparse.Namespace, ctx) -> None:
    filter = None
    if args.filter:
        filter = ProfileFilter.from_profile(read_profile_from_args(args.filter))

    try:
        profiles = await ctx.profiles.find_profiles(
            FindProfilesInput(limit=args.limit, filter=filter, include_deleted=args.all)
        )
    except UserNotFound:
        profiles = []

    fields = [
        field(p.github_user_name, render_profile(p, args.format, args.verbose))
        for p in profiles
    ]
    await ctx.reply.post_attachment(
        build_attachment(
            color=COLOR_GREEN,
            fallback="user found" if profiles else "user not found",
            text=None if profiles else "user not found",
            fields=fields,
        )
    )


async def run_update_user(args: argparse.Namespace, ctx) -> None:
    if not args.github_user_name or not args.changes:
        await ctx.reply.write_literal(args.parser.format_help())
        return

    changes = read_profile_from_args(args.changes)
    updated = await ctx.profiles.update_profile(args.github_user_name, changes)

    text = "user successfully updated"
    await ctx.reply.post_attachment(
        build_attachment(
            color=COLOR_GREEN,
            fallback=text,
            pretext=f"{EMOJI_OK_HAND} {text}",
            text=literalize(updated.pretty()),
        )
    )


async def run_delete_user(args: argparse.Namespace, ctx) -> None:
    filter = None
    if args.filter:
        filter = ProfileFilter.from_profile(read_profile_from_args(args.filter))

    result = await ctx.profiles.delete_profiles(
        DeleteProfilesInput(filter=filter, all=args.all, hard=args.hard)
    )
    if args.hard:
        text = f"{result.hard_deleted_count} user(s) hard deleted"
    else:
        text = f"{result.soft_deleted_count} user(s) soft deleted"
    await ctx.reply.post_attachment(build_attachment(color=COLOR_GREEN, text=text))
