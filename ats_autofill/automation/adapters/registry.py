"""Registry for ATS adapters."""

import logging
from collections.abc import Iterable, Iterator
from typing import TypeVar

from playwright.async_api import Page

from ats_autofill.automation.adapters.base import ATSAdapter
from ats_autofill.automation.events import EventLogger
from ats_autofill.automation.human import Human
from ats_autofill.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ATSAdapter)


class AdapterRegistry:
    """Ordered collection of adapters checked to find the one for a page.

    Provides:
    - Registration of adapter classes via decorator
    - Construction of one instance per registered class
    - First-match detection in registration order

    Usage:
        # Register an adapter
        @AdapterRegistry.register
        class AcmeAdapter(ATSAdapter):
            ...

        # Build instances once at startup
        registry = AdapterRegistry.from_registered(human, events, settings)

        # Detect the adapter for a loaded page
        adapter = await registry.detect(page)
    """

    _adapter_classes: dict[str, type[ATSAdapter]] = {}

    def __init__(
        self,
        adapters: Iterable[ATSAdapter] = (),
        events: EventLogger | None = None,
    ) -> None:
        self.events = events or EventLogger()
        self._adapters: list[ATSAdapter] = []
        for adapter in adapters:
            self.add(adapter)

    @classmethod
    def register(cls, adapter_class: type[T]) -> type[T]:
        """Register an adapter class.

        Use as a decorator:
            @AdapterRegistry.register
            class MyAdapter(ATSAdapter):
                ...

        Args:
            adapter_class: Adapter class to register

        Returns:
            The registered class (for decorator pattern)

        Raises:
            ValueError: if another class already uses the same platform id
        """
        platform_id = adapter_class.platform_id
        existing = cls._adapter_classes.get(platform_id)
        if existing is not None and existing is not adapter_class:
            raise ValueError(f"Duplicate ATS platform id: {platform_id}")

        cls._adapter_classes[platform_id] = adapter_class
        logger.debug(f"Registered ATS adapter: {platform_id}")
        return adapter_class

    @classmethod
    def registered_classes(cls) -> list[type[ATSAdapter]]:
        """Registered adapter classes in registration order."""
        return list(cls._adapter_classes.values())

    @classmethod
    def from_registered(
        cls,
        human: Human | None = None,
        events: EventLogger | None = None,
        settings: Settings | None = None,
    ) -> "AdapterRegistry":
        """Instantiate every registered adapter class once."""
        return cls(
            (
                adapter_class(human=human, events=events, settings=settings)
                for adapter_class in cls._adapter_classes.values()
            ),
            events=events,
        )

    def add(self, adapter: ATSAdapter) -> None:
        """Append an adapter instance; ids must be unique."""
        if self.get(adapter.platform_id) is not None:
            raise ValueError(f"Duplicate ATS platform id: {adapter.platform_id}")
        self._adapters.append(adapter)

    def get(self, platform_id: str) -> ATSAdapter | None:
        """Get adapter instance by platform id."""
        for adapter in self._adapters:
            if adapter.platform_id == platform_id.lower():
                return adapter
        return None

    def platform_ids(self) -> list[str]:
        """Platform ids in detection order."""
        return [adapter.platform_id for adapter in self._adapters]

    def __len__(self) -> int:
        return len(self._adapters)

    def __iter__(self) -> Iterator[ATSAdapter]:
        return iter(self._adapters)

    async def detect(self, page: Page) -> ATSAdapter | None:
        """Return the first adapter whose ``can_handle`` answers True.

        Errors raised by a detection check count as "no match" and the scan
        continues with the next adapter.

        Returns:
            Matching adapter, or None when no adapter applies
        """
        for adapter in self._adapters:
            try:
                if await adapter.can_handle(page):
                    self.events.info("core", "detect", "adapter matched", adapter=adapter.platform_id)
                    return adapter
            except Exception as e:
                self.events.warning(
                    "core", "detect", "detection check failed", adapter=adapter.platform_id, error=str(e)
                )

        self.events.warning("core", "detect", "no adapter matched", url=page.url)
        return None
