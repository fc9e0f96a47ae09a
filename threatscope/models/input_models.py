"""
Assessment Input Models — typed subjects handed to the engine by input suppliers.

Validation failures here become InvalidInput: a malformed subject never
reaches the detectors.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from threatscope.core.calldata import (
    METHOD_TABLE,
    SELECTOR_PATTERN,
    MethodSpec,
    decode_calldata,
    normalize_params,
    parse_int,
)

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
WEI_PER_NATIVE = 10**18
WEI_PER_GWEI = 10**9


def _check_address(value: str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not ADDRESS_PATTERN.match(value):
        raise ValueError(f"Invalid address: {value!r}")
    return value


class DecodedCall(BaseModel):
    """A contract call already split into selector and decoded parameters."""

    selector: str = Field(..., description="4-byte selector as 0x-prefixed hex")
    decoded_params: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        selector = data.get("selector")
        if not isinstance(selector, str) or not SELECTOR_PATTERN.match(selector.lower()):
            raise ValueError(f"Invalid selector: {selector!r}")
        selector = selector.lower()
        params = data.get("decoded_params") or {}
        if not isinstance(params, dict):
            raise ValueError("decoded_params must be a mapping")
        return {**data, "selector": selector, "decoded_params": normalize_params(selector, params)}

    @property
    def spec(self) -> MethodSpec | None:
        return METHOD_TABLE.get(self.selector)

    @property
    def method_name(self) -> str | None:
        spec = self.spec
        return spec.name if spec else None


class TransactionInput(BaseModel):
    """A single transaction, optionally with its decoded call."""

    hash: str | None = None
    from_address: str
    to_address: str | None = None
    value_wei: int = Field(default=0, ge=0)
    gas_price_wei: int = Field(default=0, ge=0)
    gas_used: int = Field(default=0, ge=0)
    data: str = "0x"
    call: DecodedCall | None = None
    observed_at: datetime | None = None
    sender_recent_tx_count: int | None = Field(default=None, ge=0)
    contract_age_days: float | None = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @field_validator("from_address", "to_address")
    @classmethod
    def _validate_address(cls, value: str | None) -> str | None:
        return _check_address(value)

    @field_validator("value_wei", "gas_price_wei", "gas_used", mode="before")
    @classmethod
    def _parse_quantity(cls, value: Any) -> int:
        if value is None:
            return 0
        return parse_int(value)

    @field_validator("data")
    @classmethod
    def _validate_data(cls, value: str) -> str:
        if value in ("", "0x"):
            return "0x"
        if not re.fullmatch(r"0x([0-9a-fA-F]{2})*", value):
            raise ValueError("data must be 0x-prefixed, even-length hex")
        return value.lower()

    @model_validator(mode="before")
    @classmethod
    def _decode_call_from_data(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("call") is not None:
            return data
        raw = data.get("data")
        if isinstance(raw, str) and len(raw) >= 10:
            try:
                selector, params = decode_calldata(raw)
            except ValueError:
                return data  # the data validator reports the problem
            return {**data, "call": {"selector": selector, "decoded_params": params}}
        return data

    @property
    def subject(self) -> str:
        return self.hash or f"{self.from_address}->{self.to_address or 'create'}"

    @property
    def value_native(self) -> float:
        return self.value_wei / WEI_PER_NATIVE

    @property
    def gas_price_gwei(self) -> float:
        return self.gas_price_wei / WEI_PER_GWEI

    @property
    def has_call_data(self) -> bool:
        return self.data != "0x"


class HoneypotIndicator(BaseModel):
    severity: str = Field(default="MEDIUM", description="HIGH or MEDIUM")
    description: str = ""

    model_config = {"frozen": True}

    @field_validator("severity")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class ContractProfileInput(BaseModel):
    """
    Contract introspection results.

    ``None`` means the introspection layer could not obtain the figure; the
    matching detector then reports itself unavailable.
    """

    address: str
    risk_factors: list[str] = Field(default_factory=list)
    whale_concentration: float | None = Field(default=None, ge=0, le=100)
    holder_count: int | None = Field(default=None, ge=0)
    owner_controls: list[str] = Field(default_factory=list)
    liquidity_score: float | None = Field(default=None, ge=0, le=100)
    bot_activity: bool | None = None
    honeypot_indicators: list[HoneypotIndicator] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return _check_address(value)

    @property
    def subject(self) -> str:
        return self.address


class PlatformActivity(BaseModel):
    """Mentions of a subject on one social platform."""

    platform: str = Field(..., min_length=1)
    available: bool = True
    mentions: int = Field(default=0, ge=0)
    sentiment: float = Field(default=0.0, ge=-1.0, le=1.0, description="Mean per-post sentiment")
    posts: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("platform")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.lower()


class SocialCorpusInput(BaseModel):
    """A search-term bundle and the per-platform activity found for it."""

    subject: str = Field(..., min_length=1)
    platforms: list[PlatformActivity] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def available_platforms(self) -> list[PlatformActivity]:
        return [p for p in self.platforms if p.available]

    @property
    def total_mentions(self) -> int:
        return sum(p.mentions for p in self.available_platforms)
