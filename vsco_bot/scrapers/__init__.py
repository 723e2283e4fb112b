"""Media sources package.

Contains the profile media retrieval layer the bot delegates to:
- MediaSource: Protocol consumed by the fetch orchestrator
- BaseScraper: Shared logging helpers for concrete sources
- VscoScraper: VSCO implementation backed by the public media API
"""

from .base import BaseScraper, MediaSource
from .vsco import VscoScraper, vsco_scraper

__all__ = [
    'MediaSource',
    'BaseScraper',
    'VscoScraper',
    'vsco_scraper',
]
