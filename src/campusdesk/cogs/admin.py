import logging

import discord
from discord import slash_command

from campusdesk.utils.permissions import is_admin

log = logging.getLogger(__name__)


def _stats_embed(stats: dict) -> discord.Embed:
    faq = stats["faq_cache"]
    kw = stats["keyword_cache"]
    embed = discord.Embed(title="FAQ caches", color=discord.Color.blue())

    per_source = "\n".join(f"{name}: {count}" for name, count in faq["by_source"].items()) or "-"
    embed.add_field(name="FAQ entries", value=str(faq["entries"]), inline=True)
    embed.add_field(name="Refreshes", value=str(faq["refresh_count"]), inline=True)
    embed.add_field(name="By source", value=per_source, inline=False)
    embed.add_field(name="Last FAQ refresh", value=faq["last_refresh"] or "never", inline=False)
    if faq["failed_sources"]:
        embed.add_field(name="Failed sources", value=", ".join(faq["failed_sources"]), inline=False)

    embed.add_field(name="Keyword entries", value=str(kw["entries"]), inline=True)
    embed.add_field(name="Last keyword refresh", value=kw["last_refresh"] or "never", inline=False)

    chats = stats.get("chat_logs")
    if chats:
        intents = "\n".join(f"{name}: {count}" for name, count in chats["intents"].items()) or "-"
        embed.add_field(name="Chats logged", value=str(chats["total"]), inline=True)
        embed.add_field(name="Avg latency", value=f"{chats['avg_latency_ms']} ms", inline=True)
        embed.add_field(name="Errors", value=str(chats["error_count"]), inline=True)
        embed.add_field(name="Unanswered", value=str(chats["unanswered"]), inline=True)
        embed.add_field(name="By intent", value=intents[:1024], inline=False)
    return embed


class AdminCog(discord.Cog):
    """Admin-only cache maintenance."""

    def __init__(self, bot: discord.Bot):
        self.bot = bot

    async def _deny_non_admin(self, ctx: discord.ApplicationContext) -> bool:
        member = ctx.author
        if isinstance(member, discord.Member) and is_admin(member):
            return False
        await ctx.respond("You need administrator permission for this.", ephemeral=True)
        return True

    @slash_command(
        name="faq_refresh",
        description="Reload FAQ and keyword caches from every source.",
        default_member_permissions=discord.Permissions(administrator=True),
    )
    async def faq_refresh(self, ctx: discord.ApplicationContext):
        if await self._deny_non_admin(ctx):
            return
        await ctx.defer(ephemeral=True)
        counts = await self.bot.engine.refresh_all()
        log.info("FAQ refresh requested by %s", ctx.author)
        await ctx.followup.send(
            f"Reloaded {counts['faqs']} FAQs and {counts['keywords']} keyword FAQs.",
            ephemeral=True,
        )

    @slash_command(
        name="faq_stats",
        description="Show FAQ cache counters.",
        default_member_permissions=discord.Permissions(administrator=True),
    )
    async def faq_stats(self, ctx: discord.ApplicationContext):
        if await self._deny_non_admin(ctx):
            return
        await ctx.respond(embed=_stats_embed(self.bot.engine.stats()), ephemeral=True)


def setup(bot: discord.Bot):
    bot.add_cog(AdminCog(bot))
