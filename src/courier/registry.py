"""Unit registry: the dispatch table built once at startup."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from courier.descriptors import Descriptor, ServiceDescriptor, State
from courier.errors import DuplicateUnitError, UnknownUnitError


class Registry:
    """Tag-indexed descriptors for every unit in the aggregate."""

    def __init__(self, descriptors: Iterable[Descriptor] = ()) -> None:
        self._units: dict[str, Descriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: Descriptor) -> Descriptor:
        """Register one descriptor.

        Raises:
            DuplicateUnitError: If the tag is already taken. Services are
                singletons, so a second instance is never silently accepted.
        """
        if descriptor.tag in self._units:
            raise DuplicateUnitError(descriptor.tag)
        self._units[descriptor.tag] = descriptor
        logger.debug(
            "registry.register tag={} kind={}",
            descriptor.tag,
            "service" if descriptor.is_service else "component",
        )
        return descriptor

    def has(self, tag: str) -> bool:
        return tag in self._units

    def get(self, tag: str) -> Descriptor | None:
        return self._units.get(tag)

    def get_or_raise(self, tag: str) -> Descriptor:
        descriptor = self.get(tag)
        if descriptor is None:
            raise UnknownUnitError(tag)
        return descriptor

    def service(self, tag: str) -> ServiceDescriptor | None:
        """Return the service under ``tag``, or None for components and misses."""
        descriptor = self._units.get(tag)
        if isinstance(descriptor, ServiceDescriptor):
            return descriptor
        return None

    def descriptors(self) -> list[Descriptor]:
        return list(self._units.values())

    def services(self) -> list[ServiceDescriptor]:
        return [item for item in self._units.values() if isinstance(item, ServiceDescriptor)]

    def tags(self) -> list[str]:
        return list(self._units)

    def initial_state(self) -> State:
        """Aggregate state holding every unit's ``init()`` value."""
        state: State = {}
        for descriptor in self._units.values():
            state = descriptor.write(descriptor.init(), state)
        return state

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, tag: object) -> bool:
        return tag in self._units
