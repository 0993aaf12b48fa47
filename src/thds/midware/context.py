"""Context definitions: named channels through which a value can be threaded
down a middleware chain.

```
User = create_context("User")
Locale = create_context("Locale", default="en-US")

stack = ContextStack.create_empty().with_(User.provider(alice))
stack.get(User.consumer)  # alice
stack.get(Locale.consumer)  # 'en-US'
```

Two definitions never match each other during lookup, even when they were
created with the same name - the name is only for humans.
"""
import itertools
import typing as ty
from dataclasses import dataclass, field

from thds.core.log import getLogger

T = ty.TypeVar("T")

logger = getLogger(__name__)


class _NoDefault:
    def __repr__(self) -> str:
        return "<no default>"


NO_DEFAULT: ty.Any = _NoDefault()
_SERIALS = itertools.count()


@dataclass(frozen=True, eq=False)
class ContextDefinition(ty.Generic[T]):
    """Identity of a context channel. Equality and hashing are by identity."""

    name: str
    default: T = NO_DEFAULT
    serial: int = field(default_factory=lambda: next(_SERIALS), repr=False)

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def __repr__(self) -> str:
        return f"ContextDefinition({self.name!r}#{self.serial})"


@dataclass(frozen=True)
class Consumer(ty.Generic[T]):
    definition: ContextDefinition[T]


@dataclass(frozen=True)
class ContextProvider(ty.Generic[T]):
    definition: ContextDefinition[T]
    value: T

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass(frozen=True)
class Context(ty.Generic[T]):
    """What `create_context` hands back: the read handle and the provider factory
    for one freshly-minted definition.
    """

    definition: ContextDefinition[T]
    consumer: Consumer[T]

    def provider(self, value: T) -> ContextProvider[T]:
        return ContextProvider(self.definition, value)


def create_context(name: str, default: T = NO_DEFAULT) -> Context[T]:
    definition: ContextDefinition[T] = ContextDefinition(name, default)
    logger.debug("Created context definition", context=repr(definition), has_default=definition.has_default)
    return Context(definition, Consumer(definition))
