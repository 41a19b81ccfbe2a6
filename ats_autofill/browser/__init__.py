"""Browsing context lifecycle for one submission."""

from ats_autofill.browser.session import PlaywrightSession, SessionConfig

__all__ = [
    "PlaywrightSession",
    "SessionConfig",
]
