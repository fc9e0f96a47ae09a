"""
Tests for External Intel — feed isolation, partial failure, identity caching.
"""

import asyncio

import pytest

from conftest import RECIPIENT, SCAM, SENDER
from threatscope.cache.lookup_cache import LookupCache
from threatscope.core.detectors.external_intel import (
    AttackAlertFeed,
    BlocklistFeed,
    ExternalIntelDetector,
    IdentityFeed,
)
from threatscope.core.errors import DetectorUnavailable
from threatscope.models.input_models import TransactionInput
from threatscope.models.signal_models import Polarity


def _tx(to=RECIPIENT):
    return TransactionInput(from_address=SENDER, to_address=to)


async def _two_alerts(address):
    return [{"name": "Phishing"}, {"name": "Drainer"}]


async def _broken(address):
    raise ConnectionError("feed down")


async def _hangs(address):
    await asyncio.sleep(5)
    return []


def test_blocklist_hit():
    signals = asyncio.run(BlocklistFeed([SCAM]).lookup(_tx(to=SCAM.lower())))
    assert [s.kind for s in signals] == ["KNOWN_SCAM_ADDRESS"]
    assert signals[0].confidence == 0.95
    assert signals[0].source == "external_intel.scam_blocklist"


def test_attack_alerts_scale_with_count():
    signals = asyncio.run(AttackAlertFeed(_two_alerts).lookup(_tx()))
    assert signals[0].weight == 20
    assert "Phishing" in signals[0].description


def test_failed_feed_is_skipped():
    detector = ExternalIntelDetector([AttackAlertFeed(_broken), BlocklistFeed([SCAM])], feed_timeout=0.5)
    signals = asyncio.run(detector(_tx(to=SCAM)))
    assert [s.kind for s in signals] == ["KNOWN_SCAM_ADDRESS"]


def test_slow_feed_times_out_without_blocking_others():
    detector = ExternalIntelDetector([AttackAlertFeed(_hangs), AttackAlertFeed(_two_alerts)], feed_timeout=0.1)
    signals = asyncio.run(detector(_tx()))
    assert [s.kind for s in signals] == ["ATTACK_FEED_ALERTS"]


def test_all_feeds_failing_makes_detector_unavailable():
    detector = ExternalIntelDetector([AttackAlertFeed(_broken), AttackAlertFeed(_hangs)], feed_timeout=0.1)
    with pytest.raises(DetectorUnavailable):
        asyncio.run(detector(_tx()))


def test_verified_identity_is_mitigating_and_cached():
    calls = []

    async def resolve(address):
        calls.append(address)
        return {"identity": "vitalik.eth"}

    cache = LookupCache(capacity=8, ttl_seconds=60)
    feed = IdentityFeed(resolve, cache=cache)

    first = asyncio.run(feed.lookup(_tx()))
    second = asyncio.run(feed.lookup(_tx()))

    assert first == second
    assert first[0].polarity == Polarity.MITIGATING
    assert first[0].kind == "VERIFIED_IDENTITY"
    assert calls == [SENDER]
    assert cache.hits == 1


def test_negative_identity_result_is_cached_too():
    calls = []

    async def resolve(address):
        calls.append(address)
        return None

    cache = LookupCache()
    feed = IdentityFeed(resolve, cache=cache)
    assert asyncio.run(feed.lookup(_tx())) == []
    assert asyncio.run(feed.lookup(_tx())) == []
    assert len(calls) == 1
