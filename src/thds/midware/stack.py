"""An immutable, persistent stack of context providers.

Every `with_` returns a new stack that shares everything below it with the
receiver, so one stack can be the common ancestor of any number of
independently-extended branches (including ones running concurrently) without
any of them seeing each other's values.

Subclass ContextStack to carry extra behavior along a pipeline. `create_empty`
and `with_` both build new instances through `_new`, which by default calls
`type(self)(provider, parent)`, so a subclass keeps its own type through every
extension as long as its constructor accepts the same two arguments.
"""
import typing as ty

from typing_extensions import Self

from .context import Consumer, ContextProvider
from .errors import MissingContext

T = ty.TypeVar("T")


class DebugEntry(ty.NamedTuple):
    name: str
    value: ty.Any


class ContextStack:
    def __init__(
        self,
        provider: ty.Optional[ContextProvider] = None,
        parent: ty.Optional["ContextStack"] = None,
    ):
        """Only `create_empty` and `_new` should call this.

        An entry must always sit on top of some existing stack (possibly the
        empty one). A provider with no parent, or a parent with no provider, is rejected.
        """
        if provider is not None and parent is None:
            raise ValueError(f"Cannot create a ContextStack entry for '{provider.name}' without a parent stack")
        if provider is None and parent is not None:
            raise ValueError("Cannot create a ContextStack entry with a parent but no provider")
        self._provider = provider
        self._parent = parent

    @classmethod
    def create_empty(cls) -> Self:
        return cls()

    def _new(self, provider: ContextProvider, parent: Self) -> Self:
        return type(self)(provider, parent)

    def with_(self, *providers: ContextProvider) -> Self:
        """Extend with providers in argument order; later ones shadow earlier ones.

        With no providers, returns `self` - not a copy.
        """
        for provider in providers:
            if not isinstance(provider, ContextProvider):
                raise TypeError(f"ContextStack.with_ expects ContextProviders, got {type(provider).__name__}")
        stack = self
        for provider in providers:
            stack = stack._new(provider, stack)
        return stack

    def _find(self, consumer: Consumer) -> ty.Optional[ContextProvider]:
        definition = consumer.definition
        node: ty.Optional[ContextStack] = self
        while node is not None and node._provider is not None:
            if node._provider.definition is definition:
                return node._provider
            node = node._parent
        return None

    def get(self, consumer: Consumer[T]) -> ty.Optional[T]:
        provider = self._find(consumer)
        if provider is not None:
            return provider.value
        definition = consumer.definition
        return definition.default if definition.has_default else None

    def get_or_fail(self, consumer: Consumer[T]) -> T:
        provider = self._find(consumer)
        if provider is not None:
            return provider.value
        definition = consumer.definition
        if not definition.has_default:
            raise MissingContext(definition)
        return definition.default

    def has(self, consumer: Consumer) -> bool:
        """True only for an explicitly provided value; a default does not count."""
        return self._find(consumer) is not None

    def __iter__(self) -> ty.Iterator[ContextProvider]:
        # newest first, which is lookup order
        node: ty.Optional[ContextStack] = self
        while node is not None and node._provider is not None:
            yield node._provider
            node = node._parent

    def debug(self) -> ty.List[DebugEntry]:
        """Explicit entries only, oldest first. For logging, not for lookups."""
        return [DebugEntry(p.name, p.value) for p in reversed(list(self))]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.debug()!r})"
