"""Ranked ladder match history collector for the Riot Games API."""

__version__ = "0.1.0"
