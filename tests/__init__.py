"""Tests for the lol-match-collector service."""
