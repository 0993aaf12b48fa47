"""Composable middleware chains that thread an immutable context stack."""

from thds.core import meta

from . import deferred  # noqa: F401
from .compose import Composed, Middleware, Next, compose  # noqa: F401
from .context import Consumer, Context, ContextDefinition, ContextProvider, create_context  # noqa: F401
from .deferred import settle, then  # noqa: F401
from .errors import InvalidMiddleware, MidwareError, MissingContext, NextCalledTwice  # noqa: F401
from .stack import ContextStack, DebugEntry  # noqa: F401

__version__ = meta.get_version(__name__)
