import discord


def is_admin(member: discord.Member) -> bool:
    return bool(getattr(member.guild_permissions, "administrator", False))
