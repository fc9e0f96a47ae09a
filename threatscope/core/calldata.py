"""
Calldata — static method-selector table and raw calldata decoding.

Decoding is deliberately shallow: static ABI words (address, uintN, bool,
bytes32) are read from their 32-byte slots; dynamic parameters (bytes,
arrays) are left undecoded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from threatscope.models.signal_models import SignalCategory


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class MethodSpec:
    """Static description of a known 4-byte selector."""

    name: str
    signature: str
    params: tuple[tuple[str, str], ...]
    tier: RiskTier
    category: SignalCategory
    description: str
    approval_amount_param: str | None = None
    factors: tuple[str, ...] = field(default_factory=tuple)

    def param_type(self, param_name: str) -> str | None:
        for name, type_ in self.params:
            if name == param_name:
                return type_
        return None


_O, _A, _T, _L = (
    SignalCategory.OWNERSHIP,
    SignalCategory.APPROVAL,
    SignalCategory.TRANSFER,
    SignalCategory.LIQUIDITY,
)

METHOD_TABLE: dict[str, MethodSpec] = {
    # ERC-20
    "0x095ea7b3": MethodSpec(
        "approve", "approve(address,uint256)",
        (("spender", "address"), ("amount", "uint256")),
        RiskTier.MEDIUM, _A, "Token approval - check amount carefully",
        approval_amount_param="amount",
    ),
    "0xa9059cbb": MethodSpec(
        "transfer", "transfer(address,uint256)",
        (("to", "address"), ("amount", "uint256")),
        RiskTier.LOW, _T, "Token transfer",
    ),
    "0x23b872dd": MethodSpec(
        "transferFrom", "transferFrom(address,address,uint256)",
        (("from", "address"), ("to", "address"), ("amount", "uint256")),
        RiskTier.MEDIUM, _T, "Transfer tokens from another address",
    ),
    # ERC-721
    "0x42842e0e": MethodSpec(
        "safeTransferFrom", "safeTransferFrom(address,address,uint256)",
        (("from", "address"), ("to", "address"), ("tokenId", "uint256")),
        RiskTier.MEDIUM, _T, "NFT transfer",
    ),
    "0xb88d4fde": MethodSpec(
        "safeTransferFrom", "safeTransferFrom(address,address,uint256,bytes)",
        (("from", "address"), ("to", "address"), ("tokenId", "uint256"), ("data", "bytes")),
        RiskTier.MEDIUM, _T, "NFT transfer with data",
    ),
    "0xa22cb465": MethodSpec(
        "setApprovalForAll", "setApprovalForAll(address,bool)",
        (("operator", "address"), ("approved", "bool")),
        RiskTier.HIGH, _A, "Approve all NFTs to operator",
    ),
    # Ownership and access control
    "0xf2fde38b": MethodSpec(
        "transferOwnership", "transferOwnership(address)",
        (("newOwner", "address"),),
        RiskTier.CRITICAL, _O, "Transfer contract ownership",
        factors=("OWNERSHIP_TRANSFER",),
    ),
    "0x715018a6": MethodSpec(
        "renounceOwnership", "renounceOwnership()",
        (),
        RiskTier.MEDIUM, _O, "Renounce contract ownership",
    ),
    "0x2f2ff15d": MethodSpec(
        "grantRole", "grantRole(bytes32,address)",
        (("role", "bytes32"), ("account", "address")),
        RiskTier.HIGH, _O, "Grant administrative role",
    ),
    "0xd547741f": MethodSpec(
        "revokeRole", "revokeRole(bytes32,address)",
        (("role", "bytes32"), ("account", "address")),
        RiskTier.MEDIUM, _O, "Revoke administrative role",
    ),
    # EIP-2612 permit
    "0xd505accf": MethodSpec(
        "permit", "permit(address,address,uint256,uint256,uint8,bytes32,bytes32)",
        (("owner", "address"), ("spender", "address"), ("value", "uint256"),
         ("deadline", "uint256"), ("v", "uint8"), ("r", "bytes32"), ("s", "bytes32")),
        RiskTier.CRITICAL, _A, "Gasless approval via signature",
        approval_amount_param="value",
        factors=("PERMIT_SIGNATURE",),
    ),
    # DEX
    "0x38ed1739": MethodSpec(
        "swapExactTokensForTokens", "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)",
        (("amountIn", "uint256"), ("amountOutMin", "uint256"), ("path", "address[]"),
         ("to", "address"), ("deadline", "uint256")),
        RiskTier.LOW, _T, "DEX token swap",
    ),
    "0x7ff36ab5": MethodSpec(
        "swapExactETHForTokens", "swapExactETHForTokens(uint256,address[],address,uint256)",
        (("amountOutMin", "uint256"), ("path", "address[]"), ("to", "address"), ("deadline", "uint256")),
        RiskTier.LOW, _T, "DEX native to token swap",
    ),
    # Liquidity
    "0xe8e33700": MethodSpec(
        "addLiquidity", "addLiquidity(address,address,uint256,uint256,uint256,uint256,address,uint256)",
        (("tokenA", "address"), ("tokenB", "address"), ("amountADesired", "uint256"),
         ("amountBDesired", "uint256"), ("amountAMin", "uint256"), ("amountBMin", "uint256"),
         ("to", "address"), ("deadline", "uint256")),
        RiskTier.LOW, _L, "Add liquidity to pool",
    ),
    "0xbaa2abde": MethodSpec(
        "removeLiquidity", "removeLiquidity(address,address,uint256,uint256,uint256,address,uint256)",
        (("tokenA", "address"), ("tokenB", "address"), ("liquidity", "uint256"),
         ("amountAMin", "uint256"), ("amountBMin", "uint256"), ("to", "address"), ("deadline", "uint256")),
        RiskTier.HIGH, _L, "Remove liquidity from pool - check if authorized",
    ),
    # Proxy upgrades
    "0x3659cfe6": MethodSpec(
        "upgradeTo", "upgradeTo(address)",
        (("newImplementation", "address"),),
        RiskTier.CRITICAL, _O, "Upgrade proxy implementation",
        factors=("PROXY_UPGRADE",),
    ),
    "0x4f1ef286": MethodSpec(
        "upgradeToAndCall", "upgradeToAndCall(address,bytes)",
        (("newImplementation", "address"), ("data", "bytes")),
        RiskTier.CRITICAL, _O, "Upgrade proxy and execute",
        factors=("PROXY_UPGRADE",),
    ),
    # Batching and flash loans
    "0xac9650d8": MethodSpec(
        "multicall", "multicall(bytes[])",
        (("data", "bytes[]"),),
        RiskTier.HIGH, SignalCategory.ATTACK_PATTERN, "Execute multiple calls - check all nested calls",
        factors=("BATCH_EXECUTION",),
    ),
    "0x5cffe9de": MethodSpec(
        "flashLoan", "flashLoan(address,address,uint256,bytes)",
        (("receiverAddress", "address"), ("asset", "address"), ("amount", "uint256"), ("params", "bytes")),
        RiskTier.HIGH, _L, "Flash loan - often used in attacks",
    ),
}

SELECTOR_PATTERN = re.compile(r"^0x[0-9a-f]{8}$")
_UINT_TYPE = re.compile(r"^uint(\d*)$")
_HEX_DATA = re.compile(r"^0x([0-9a-fA-F]{2})*$")


def uint_bits(type_: str | None) -> int | None:
    """Bit width of a ``uintN`` ABI type, or None for non-integer types."""
    if not type_:
        return None
    match = _UINT_TYPE.match(type_)
    if not match:
        return None
    return int(match.group(1) or 256)


def max_uint(bits: int) -> int:
    return (1 << bits) - 1


def parse_int(value) -> int:
    """
    Parse an integer carried as int, decimal string or 0x-hex string.

    Raises:
        ValueError: if the value is not an unsigned integer.
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected integer, got bool {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            result = int(text, 16)
        else:
            result = int(text, 10)
    else:
        raise ValueError(f"Expected integer, got {type(value).__name__}")
    if result < 0:
        raise ValueError(f"Expected unsigned integer, got {result}")
    return result


def normalize_params(selector: str, params: dict) -> dict:
    """Coerce integer-typed parameters of a known selector to int."""
    spec = METHOD_TABLE.get(selector)
    if spec is None:
        return dict(params)

    normalized = dict(params)
    for name, type_ in spec.params:
        if name in normalized and uint_bits(type_) is not None:
            try:
                normalized[name] = parse_int(normalized[name])
            except ValueError as e:
                raise ValueError(f"Parameter '{name}' of {spec.name}: {e}") from e
    return normalized


def decode_calldata(data: str) -> tuple[str, dict]:
    """
    Decode raw calldata into ``(selector, params)``.

    Unknown selectors decode to an empty parameter map. Truncated words are
    skipped rather than guessed.

    Raises:
        ValueError: if ``data`` is not 0x-prefixed hex of at least 4 bytes.
    """
    if not isinstance(data, str) or not _HEX_DATA.match(data) or len(data) < 10:
        raise ValueError("Calldata must be 0x-prefixed hex with at least a 4-byte selector")

    data = data.lower()
    selector = data[:10]
    spec = METHOD_TABLE.get(selector)
    if spec is None:
        return selector, {}

    body = data[10:]
    params: dict = {}
    for index, (name, type_) in enumerate(spec.params):
        word = body[index * 64:(index + 1) * 64]
        if len(word) < 64:
            break
        if type_ == "address":
            params[name] = "0x" + word[24:]
        elif uint_bits(type_) is not None:
            params[name] = int(word, 16)
        elif type_ == "bool":
            params[name] = int(word, 16) != 0
        elif type_ == "bytes32":
            params[name] = "0x" + word
        # dynamic types stay undecoded
    return selector, params
