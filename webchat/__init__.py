"""WebChat: conversation history, message formatting and webhook chat client."""

__version__ = "0.1.0"
