"""Two-route HTTP server that hunts for a free port and falls back to http.server."""

__version__ = "1.0.0"
