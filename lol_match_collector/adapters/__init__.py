"""Adapters layer for the lol-match-collector service.

This package contains the Riot API client and the output store.
"""
