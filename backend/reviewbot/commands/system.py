from reviewbot import clock
from reviewbot.config import VERSION
from reviewbot.slack.messages import literalize_line


async def run_version(args, ctx) -> None:
    await ctx.reply.write(literalize_line(VERSION))


async def run_uptime(args, ctx) -> None:
    await ctx.reply.write(literalize_line(str(clock.uptime())))
