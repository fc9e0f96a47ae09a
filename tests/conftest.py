"""
Test fixtures shared across all ThreatScope tests.
"""

import pytest

from threatscope.config import Settings
from threatscope.models.signal_models import Polarity, Signal, SignalCategory
from threatscope.profiles import contract, social, transaction
from threatscope.profiles.loader import load_profile

SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
SUSPICIOUS = "0x3333333333333333333333333333333333333333"
SCAM = "0x000000000000000000000000000000000000dEaD"
KNOWN_GOOD = "0xA0b86a33E6441A30B78Db73d04Bdf70a52CdEd22"
SPENDER = "0x4444444444444444444444444444444444444444"

APPROVE_SELECTOR = "0x095ea7b3"
MAX_UINT256 = 2**256 - 1


def encode_words(selector: str, *words) -> str:
    """ABI-encode static words (int or 0x address) after a selector."""
    body = ""
    for w in words:
        if isinstance(w, str):
            body += w[2:].lower().rjust(64, "0")
        else:
            body += format(int(w), "064x")
    return selector + body


def approve_calldata(spender: str = SPENDER, amount: int = MAX_UINT256) -> str:
    return encode_words(APPROVE_SELECTOR, spender, amount)


@pytest.fixture
def cfg():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        known_good_addresses=[KNOWN_GOOD],
        suspicious_addresses=[SUSPICIOUS],
        scam_addresses=[SCAM],
        detector_timeout_seconds=1.0,
        assessment_deadline_seconds=2.0,
        intel_feed_timeout_seconds=0.5,
        audit_enabled=False,
    )


@pytest.fixture
def transaction_profile(cfg):
    return load_profile(transaction.default_config(cfg))


@pytest.fixture
def contract_profile(cfg):
    return load_profile(contract.default_config(cfg))


@pytest.fixture
def social_profile(cfg):
    return load_profile(social.default_config(cfg))


@pytest.fixture
def make_signal():
    """Factory for ad-hoc signals."""

    def _make(
        kind="TEST_SIGNAL",
        weight=10.0,
        category=SignalCategory.OWNERSHIP,
        confidence=1.0,
        polarity=Polarity.RISK,
        override=False,
    ):
        return Signal(
            category=category,
            kind=kind,
            weight=weight,
            confidence=confidence,
            polarity=polarity,
            override=override,
            source="test",
        )

    return _make


@pytest.fixture
def plain_transfer():
    """Zero-value, no-calldata transaction: produces no signals."""
    return {"from_address": SENDER, "to_address": RECIPIENT}


@pytest.fixture
def unlimited_approval_tx():
    return {
        "hash": "0xabc",
        "from_address": SENDER,
        "to_address": RECIPIENT,
        "data": approve_calldata(),
    }
