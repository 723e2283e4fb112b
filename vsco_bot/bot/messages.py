"""Telegram bot message templates and constants.

Contains all user-facing message templates (Telegram Markdown), error messages
and log templates. Centralizes message management for consistent replies
across commands, validation and failure handling.
"""

# Bot commands and descriptions
START_MESSAGE = (
    "*Welcome!* ✨\n_Send a VSCO username or profile link to get recent posts._"
)
GROUPS_NOT_SUPPORTED = "*Channels and groups are not supported presently.*"
HELP_MESSAGE = (
    "*@anzubo Project.*\n\n_This bot gets the {limit} most recent media posts from a VSCO "
    "profile.\nSend a username or profile link to try it out!_"
)

# Validation messages
INVALID_LINK_MESSAGE = "*Send a valid VSCO profile link.*"
INVALID_USERNAME_MESSAGE = "*Send a valid VSCO username.*"

# Status notification
DOWNLOADING_MESSAGE = "*Downloading*"

# Error messages
SEND_FAILED_MESSAGE = "*Error contacting VSCO or Telegram API limit was hit.*"
PLATFORM_ERROR_MESSAGE = "*An error occurred: {error}*"
FETCH_FAILED_MESSAGE = (
    "*An error occurred. Are you sure you sent a valid VSCO username?*\n_Error: {error}_"
)
GENERIC_ERROR_MESSAGE = "An error occurred"

# Log messages
LOG_INCOMING_MESSAGE = "From: {name} (@{username}) ID: {user_id}\nMessage: {text}"
LOG_BLOCKED = "Bot was blocked by the user"
LOG_SEND_FAILED = "Error sending files. Maybe API limit was hit."
