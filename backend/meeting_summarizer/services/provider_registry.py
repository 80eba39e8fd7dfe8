"""
Meeting Summarizer — Provider Registry
=======================================

What:  The ordered collection of provider adapters, built once at startup.
Why:   Insertion order is the fallback order; keeping it in one immutable
       place makes failover deterministic and easy to reason about.
How:   build() turns the typed ProviderConfig list into adapters. Providers
       without a credential stay in the registry (so /health can say
       "not configured") but configured() leaves them out.
"""

import logging
from typing import Iterable, Iterator, Optional, Sequence, Tuple

import httpx

from meeting_summarizer.config import ProviderConfig
from meeting_summarizer.services.chat_completion_service import build_adapter
from meeting_summarizer.services.llm_base import ProviderAdapter

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Read-only, insertion-ordered sequence of provider adapters.

    The only mutable field is last_success_index, a diagnostic hint for the
    status endpoints. Failover never reads it: every call starts at index 0.
    """

    def __init__(self, adapters: Iterable[ProviderAdapter]):
        self._adapters: Tuple[ProviderAdapter, ...] = tuple(adapters)
        names = [adapter.name for adapter in self._adapters]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate provider names in registry: {names}")
        self.last_success_index: Optional[int] = None

    @classmethod
    def build(
        cls,
        configs: Sequence[ProviderConfig],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ProviderRegistry":
        """
        Construct one adapter per configuration record, preserving order.

        A missing credential is not an error here; it is reported by status
        checks and by the startup validation in config.py.
        """
        adapters = []
        for config in configs:
            adapter = build_adapter(config, transport=transport)
            if not adapter.configured:
                logger.warning(
                    "Provider %s has no credential; it will be reported but skipped",
                    adapter.name,
                )
            adapters.append(adapter)

        registry = cls(adapters)
        logger.info(
            "Provider registry built: order=%s, configured=%s",
            [a.name for a in registry.all()],
            [a.name for a in registry.configured()],
        )
        return registry

    def all(self) -> Tuple[ProviderAdapter, ...]:
        return self._adapters

    def configured(self) -> Tuple[ProviderAdapter, ...]:
        return tuple(a for a in self._adapters if a.configured)

    def get(self, name: str) -> Optional[ProviderAdapter]:
        for adapter in self._adapters:
            if adapter.name == name:
                return adapter
        return None

    def record_success(self, index: int) -> None:
        """Remember which adapter (index into all()) last produced a summary."""
        self.last_success_index = index

    @property
    def last_successful(self) -> Optional[ProviderAdapter]:
        if self.last_success_index is None:
            return None
        return self._adapters[self.last_success_index]

    def __iter__(self) -> Iterator[ProviderAdapter]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)
