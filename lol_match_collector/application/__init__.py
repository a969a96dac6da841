"""Application layer for the lol-match-collector service."""

from .collector import EntryResolver, MatchIngester, PageCrawler

__all__ = ["EntryResolver", "MatchIngester", "PageCrawler"]
