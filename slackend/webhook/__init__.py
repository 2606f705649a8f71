"""Slack webhook server subpackage.

Contains the FastAPI app factory, the gateway routes and the CLI for
receiving Slack callbacks and publishing them through a publish adapter.
"""
