"""Pydantic schemas for request/response validation."""

from .checkout import *  # noqa: F403
from .common import *  # noqa: F403
from .reference import *  # noqa: F403
from .tour import *  # noqa: F403
