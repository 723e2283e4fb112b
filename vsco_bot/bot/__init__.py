"""Telegram bot implementation package.

Contains all Telegram bot specific functionality including message handlers,
the request flow, the chat transport and user-facing message templates.
Handles command processing, input validation and media delivery.
"""
