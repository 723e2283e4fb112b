"""VSCO Media Bot Application Package.

A Telegram bot that takes a VSCO username or profile link and replies with the
profile's most recent photos, videos and animations, grouped into media
galleries of up to ten items.

The application follows a modular architecture with separate concerns for:
- Bot handlers and the per-message request flow
- Username resolution, media classification and batching
- Media retrieval from VSCO
- Configuration and error classification
"""
