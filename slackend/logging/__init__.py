"""Centralized logging configuration for slackend."""
