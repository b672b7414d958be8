import logging
from typing import Mapping

import discord
from discord import option, slash_command

from campusdesk.dispatch.dispatcher import FALLBACK_INTENT, DispatchRequest

log = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def _clip(text: str) -> str:
    return text if len(text) <= MAX_MESSAGE_LENGTH else text[: MAX_MESSAGE_LENGTH - 1] + "…"


class AskCog(discord.Cog):
    """Student-facing commands; every command goes through the intent dispatcher."""

    def __init__(self, bot: discord.Bot):
        self.bot = bot

    async def _reply(
        self,
        ctx: discord.ApplicationContext,
        intent: str,
        query: str = "",
        params: Mapping[str, str] | None = None,
        *,
        ephemeral: bool = False,
    ) -> None:
        await ctx.defer(ephemeral=ephemeral)
        request = DispatchRequest(intent_name=intent, parameters=dict(params or {}), query_text=query)
        response = await self.bot.engine.dispatcher.dispatch(request)
        await ctx.followup.send(_clip(response.response_text), ephemeral=ephemeral)

    @slash_command(name="ask", description="Ask a campus question.")
    @option("question", description="What do you want to know?")
    async def ask(self, ctx: discord.ApplicationContext, question: str):
        await self._reply(ctx, FALLBACK_INTENT, query=question)

    @slash_command(name="fees", description="Show your pending fees and scholarships.")
    @option("student_id", description="Your student ID, e.g. STU001")
    async def fees(self, ctx: discord.ApplicationContext, student_id: str):
        await self._reply(ctx, "FinanceIntent", params={"studentId": student_id}, ephemeral=True)

    @slash_command(name="parent", description="Open the parent dashboard.")
    @option("parent_id", description="Your parent ID, e.g. PARENT001")
    async def parent(self, ctx: discord.ApplicationContext, parent_id: str):
        await self._reply(ctx, "ParentStatusIntent", params={"parentId": parent_id}, ephemeral=True)

    @slash_command(name="mentor", description="Open the mentor dashboard.")
    @option("mentor_id", description="Your mentor ID, e.g. MENTOR001")
    async def mentor(self, ctx: discord.ApplicationContext, mentor_id: str):
        await self._reply(ctx, "MentorStatusIntent", params={"mentorId": mentor_id}, ephemeral=True)

    @slash_command(name="reminders", description="Show your latest reminders.")
    @option("student_id", description="Your student ID", required=False, default="")
    async def reminders(self, ctx: discord.ApplicationContext, student_id: str = ""):
        await self._reply(ctx, "ReminderIntent", params={"studentId": student_id}, ephemeral=True)

    @slash_command(name="mentors", description="Find a mentor by field.")
    @option("field", description="e.g. AI, commerce", required=False, default="")
    async def mentors(self, ctx: discord.ApplicationContext, field: str = ""):
        await self._reply(ctx, "MentorshipIntent", params={"field": field})

    @slash_command(name="counseling", description="How to reach the campus counselor.")
    async def counseling(self, ctx: discord.ApplicationContext):
        await self._reply(ctx, "CounselingIntent", ephemeral=True)

    @slash_command(name="marketplace", description="About the student marketplace.")
    async def marketplace(self, ctx: discord.ApplicationContext):
        await self._reply(ctx, "MarketplaceIntent")


def setup(bot):
    bot.add_cog(AskCog(bot))
