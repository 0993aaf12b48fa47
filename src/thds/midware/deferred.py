"""Helpers for middlewares that need to look at the result of `next`.

`compose` never awaits anything: whatever the chain returns is handed back
untouched, immediate or not. A middleware that wants to post-process the
result without caring which kind it got can use `then`:

```
def add_header(ctx, next):
    return then(next(ctx), lambda response: response.with_header("X-Trace", "1"))
```

and an async middleware can `await settle(next(ctx))`.
"""
import inspect
import typing as ty

T = ty.TypeVar("T")
U = ty.TypeVar("U")


def is_deferred(value: ty.Any) -> bool:
    return inspect.isawaitable(value)


async def settle(value: ty.Union[T, ty.Awaitable[T]]) -> T:
    """Await until there is nothing left to await.

    An async middleware that returns `next(ctx)` without awaiting it hands back
    a coroutine that itself resolves to an awaitable; this flattens all of
    those, the way a chain of promises would.
    """
    while inspect.isawaitable(value):
        value = await value
    return ty.cast(T, value)


def then(result: ty.Union[T, ty.Awaitable[T]], fn: ty.Callable[[T], U]) -> ty.Union[U, ty.Awaitable[U]]:
    """`fn(result)` right away if `result` is immediate, otherwise a coroutine that
    settles `result` first.
    """
    if not is_deferred(result):
        return fn(ty.cast(T, result))

    async def _then() -> U:
        return fn(await settle(result))

    return _then()
