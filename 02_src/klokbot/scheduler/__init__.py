"""Scheduler module."""

from .scheduler import ISessionScheduler, SessionScheduler

__all__ = ["ISessionScheduler", "SessionScheduler"]
