"""
FastAPI dependencies exposing the app-owned registry and resolver.
"""

from fastapi import Request

from .registry import EmoteRegistry
from .resolver import ImageResolver


def get_registry(request: Request) -> EmoteRegistry:
    return request.app.state.registry


def get_resolver(request: Request) -> ImageResolver:
    return request.app.state.resolver
