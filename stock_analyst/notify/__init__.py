"""Notification delivery for finished reports."""

from .discord import DISCORD_MAX_LENGTH, DiscordNotifier, Notifier, split_message

__all__ = ["DISCORD_MAX_LENGTH", "DiscordNotifier", "Notifier", "split_message"]
