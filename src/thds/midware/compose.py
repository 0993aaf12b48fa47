"""Fold an ordered list of middlewares into one middleware.

A middleware is any callable `(context, next) -> result`, where `next` is a
callable `(context) -> result` that runs the rest of the chain. It may

- return `next(ctx)` as-is,
- call `next` and post-process what comes back (see `deferred.then`),
- or never call `next`, which ends the chain right there.

The composed function has the same shape, so it can itself be composed:
`compose(compose(a, b), c)` behaves exactly like `compose(a, b, c)`. The last
middleware's `next` is exactly the continuation the caller passes in - compose
adds no terminal step of its own, and never awaits or unwraps results.
"""
import typing as ty

from thds.core import config
from thds.core.log import getLogger

from .errors import InvalidMiddleware, NextCalledTwice

C = ty.TypeVar("C")
R = ty.TypeVar("R")

Next = ty.Callable[[C], R]
Middleware = ty.Callable[[C, Next[C, R]], R]

logger = getLogger(__name__)

ALLOW = "allow"
FORBID = "forbid"
_REENTRY_POLICIES = (ALLOW, FORBID)


def _parse_reentry(policy: ty.Any) -> str:
    parsed = str(policy).strip().lower()
    if parsed not in _REENTRY_POLICIES:
        raise ValueError(f"Unknown re-entry policy {policy!r}; expected one of {_REENTRY_POLICIES}")
    return parsed


REENTRY = config.item("thds.midware.compose.reentry", ALLOW, parse=_parse_reentry)
# What happens when a middleware calls its `next` more than once in a single invocation:
# 'allow' runs the rest of the chain again from that point, each time;
# 'forbid' raises NextCalledTwice on the second call.
# Read when `compose` is called, not per invocation.


def _describe(middleware: ty.Callable) -> str:
    return getattr(middleware, "__qualname__", None) or repr(middleware)


class Composed(ty.Generic[C, R]):
    def __init__(self, middlewares: ty.Tuple[Middleware[C, R], ...], reentry: str):
        self.middlewares = middlewares
        self.reentry = reentry

    def __call__(self, context: C, final: Next[C, R]) -> R:
        middlewares = self.middlewares
        forbid = self.reentry == FORBID
        called: ty.Set[int] = set()  # per invocation

        def dispatch(index: int, ctx: C) -> R:
            if index == len(middlewares):
                return final(ctx)
            return middlewares[index](ctx, continuation(index + 1))

        def continuation(index: int) -> Next[C, R]:
            def next_(ctx: C) -> R:
                if forbid:
                    if index in called:
                        raise NextCalledTwice(index - 1)
                    called.add(index)
                return dispatch(index, ctx)

            return next_

        return dispatch(0, context)

    def __repr__(self) -> str:
        return f"compose({', '.join(map(_describe, self.middlewares))})"


def compose(*middlewares: Middleware[C, R], reentry: ty.Optional[str] = None) -> Composed[C, R]:
    """Raises InvalidMiddleware, naming the first non-callable argument, before
    anything is built.
    """
    for index, middleware in enumerate(middlewares):
        if not callable(middleware):
            raise InvalidMiddleware(index, middleware)

    policy = _parse_reentry(reentry) if reentry is not None else REENTRY()
    logger.debug("Composed middleware chain", count=len(middlewares), reentry=policy)
    return Composed(tuple(middlewares), policy)
