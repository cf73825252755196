"""Utility modules for tokenrelay."""

from tokenrelay.utils.replay import ReplayGuard

__all__ = ["ReplayGuard"]
