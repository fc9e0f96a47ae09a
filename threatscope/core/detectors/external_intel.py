"""
External Intel Detector — Queries independent threat-intel feeds concurrently.

Each feed contributes independently: attack-detector alerts and scam
blocklist hits add risk, a verified sender identity subtracts it. A feed
that fails or exceeds its timeout is skipped; only when every feed fails is
the detector as a whole unavailable.

Feeds never talk to the network themselves here: fetchers and resolvers are
injected by the input-supplier layer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Protocol

from threatscope.cache.lookup_cache import LookupCache
from threatscope.core.errors import DetectorUnavailable
from threatscope.models.input_models import TransactionInput
from threatscope.models.signal_models import Polarity, Signal, SignalCategory

logger = logging.getLogger("threatscope.intel")

DETECTOR_ID = "external_intel"

AlertFetcher = Callable[[str], Awaitable[list[dict]]]
IdentityResolver = Callable[[str], Awaitable[dict | None]]

_MISSING = object()


class ThreatFeed(Protocol):
    name: str

    async def lookup(self, tx: TransactionInput) -> list[Signal]: ...


class BlocklistFeed:
    """Static scam-address blocklist checked against the recipient."""

    name = "scam_blocklist"

    def __init__(self, addresses: Iterable[str], weight: float = 40.0) -> None:
        self.addresses = frozenset(a.lower() for a in addresses)
        self.weight = weight

    async def lookup(self, tx: TransactionInput) -> list[Signal]:
        if not tx.to_address or tx.to_address.lower() not in self.addresses:
            return []
        return [
            Signal(
                category=SignalCategory.EXTERNAL_INTEL,
                kind="KNOWN_SCAM_ADDRESS",
                weight=self.weight,
                confidence=0.95,
                description=f"Recipient {tx.to_address} is on the scam blocklist",
                source=f"{DETECTOR_ID}.{self.name}",
            )
        ]


class AttackAlertFeed:
    """Attack-detector alerts raised against the recipient address."""

    name = "attack_alerts"

    def __init__(self, fetch: AlertFetcher, weight_per_alert: float = 10.0) -> None:
        self.fetch = fetch
        self.weight_per_alert = weight_per_alert

    async def lookup(self, tx: TransactionInput) -> list[Signal]:
        if not tx.to_address:
            return []
        alerts = await self.fetch(tx.to_address) or []
        if not alerts:
            return []
        names = ", ".join(str(a.get("name", "alert")) for a in alerts[:3])
        return [
            Signal(
                category=SignalCategory.EXTERNAL_INTEL,
                kind="ATTACK_FEED_ALERTS",
                weight=self.weight_per_alert * len(alerts),
                confidence=0.8,
                description=f"{len(alerts)} attack-detector alert(s) on recipient: {names}",
                source=f"{DETECTOR_ID}.{self.name}",
            )
        ]


class IdentityFeed:
    """
    Sender identity lookup. A verified identity is a mitigating signal.

    Results, including "no identity", are kept in the shared LookupCache so
    repeated senders within the TTL skip the resolver.
    """

    name = "identity"

    def __init__(
        self,
        resolve: IdentityResolver,
        cache: LookupCache | None = None,
        reduction: float = 5.0,
    ) -> None:
        self.resolve = resolve
        self.cache = cache
        self.reduction = reduction

    async def _identity(self, address: str) -> dict | None:
        key = f"identity:{address.lower()}"
        if self.cache is not None:
            cached = self.cache.get(key, _MISSING)
            if cached is not _MISSING:
                return cached
        identity = await self.resolve(address)
        if self.cache is not None:
            self.cache.put(key, identity)
        return identity

    async def lookup(self, tx: TransactionInput) -> list[Signal]:
        identity = await self._identity(tx.from_address)
        if not identity or not identity.get("identity"):
            return []
        return [
            Signal(
                category=SignalCategory.IDENTITY,
                kind="VERIFIED_IDENTITY",
                weight=self.reduction,
                confidence=1.0,
                polarity=Polarity.MITIGATING,
                description=f"Sender resolves to verified identity {identity['identity']}",
                source=f"{DETECTOR_ID}.{self.name}",
            )
        ]


class ExternalIntelDetector:
    """Fans out to every feed with a per-feed timeout."""

    def __init__(self, feeds: Iterable[ThreatFeed], feed_timeout: float = 3.0) -> None:
        self.feeds = list(feeds)
        self.feed_timeout = feed_timeout

    async def _query(self, feed: ThreatFeed, tx: TransactionInput) -> list[Signal] | None:
        try:
            return await asyncio.wait_for(feed.lookup(tx), timeout=self.feed_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Feed '{feed.name}' timed out after {self.feed_timeout}s")
        except Exception as e:
            logger.warning(f"Feed '{feed.name}' failed: {type(e).__name__}: {e}")
        return None

    async def __call__(self, tx: TransactionInput) -> list[Signal]:
        if not self.feeds:
            return []

        results = await asyncio.gather(*(self._query(feed, tx) for feed in self.feeds))

        if all(r is None for r in results):
            raise DetectorUnavailable(DETECTOR_ID, "all threat-intel feeds failed")

        signals: list[Signal] = []
        for r in results:
            if r:
                signals.extend(r)
        return signals
