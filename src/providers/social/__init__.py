"""Social scrape providers.

ApifyScrapeProvider runs hosted Apify actors to search Instagram, Twitter/X,
YouTube, LinkedIn, Facebook and TikTok for profiles, and to fetch recent
posts for known handles.
"""

from src.providers.social.apify_provider import ApifyScrapeProvider

__all__ = ["ApifyScrapeProvider"]
