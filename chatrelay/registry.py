"""Name -> constructor registries for adapters and plugins."""

from typing import Any, Callable, Dict, Generic, List, TypeVar

T = TypeVar("T")


class Registry(Generic[T]):
    """Maps a config string (adapter name, plugin type) to a factory."""

    def __init__(self, kind: str):
        self.kind = kind
        self._factories: Dict[str, Callable[..., T]] = {}

    def register(self, key: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Class decorator: ``@ADAPTERS.register("console")``."""
        normalized = key.strip().lower()

        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            if normalized in self._factories:
                raise ValueError(f"Duplicate {self.kind}: {normalized}")
            self._factories[normalized] = factory
            return factory

        return decorator

    def keys(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, key: str) -> bool:
        return key.strip().lower() in self._factories

    def create(self, key: str, **kwargs: Any) -> T:
        selected = key.strip().lower()
        factory = self._factories.get(selected)
        if factory is None:
            raise ValueError(
                f"Unsupported {self.kind}: {selected} (known: {', '.join(self.keys()) or 'none'})"
            )
        return factory(**kwargs)
