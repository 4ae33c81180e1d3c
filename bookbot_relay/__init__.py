"""
BookBot Relay - A mood-aware chat relay with model fallback.

This package provides a simple webserver that forwards chat messages to a hosted
chat-completion API, trying several candidate models in order until one replies.
"""

__version__ = "0.1.0"
