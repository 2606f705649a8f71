"""Slack web client construction."""

from .factory import DefaultSlackClientFactory, SlackClientFactory, default_factory

__all__ = ["SlackClientFactory", "DefaultSlackClientFactory", "default_factory"]
