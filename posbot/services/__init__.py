"""Wiring of API wrappers and per-user state."""

from posbot.services.backend import Backend, build_backend, get_backend
from posbot.services.sessions import CountService, count_service

__all__ = ["Backend", "CountService", "build_backend", "count_service", "get_backend"]
