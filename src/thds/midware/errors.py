import typing as ty

if ty.TYPE_CHECKING:
    from .context import ContextDefinition


class MidwareError(Exception):
    """Base for every error raised by thds.midware itself."""


class InvalidMiddleware(MidwareError, TypeError):
    """Raised by `compose` when one of its arguments is not callable.

    The composed function is never built, so this always surfaces where the
    middleware list is assembled rather than on the first request.
    """

    def __init__(self, index: int, middleware: object):
        self.index = index
        self.middleware = middleware
        super().__init__(
            f"Middleware at position {index} is not callable: got {type(middleware).__name__} {middleware!r}"
        )


class MissingContext(MidwareError, LookupError):
    """Raised by `ContextStack.get_or_fail` when nothing upstream provided a
    value and the definition has no default.
    """

    def __init__(self, definition: "ContextDefinition"):
        self.definition = definition
        super().__init__(f"Missing required context '{definition.name}'")


class NextCalledTwice(MidwareError, RuntimeError):
    """Raised under the 'forbid' re-entry policy when a middleware calls its `next` a second time."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"next() given to the middleware at position {index} was called more than once")
