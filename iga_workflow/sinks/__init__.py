"""Sink implementations for reviewer notifications."""

from .slack_sink import LoggingSink, SlackSink

__all__ = ["SlackSink", "LoggingSink"]
