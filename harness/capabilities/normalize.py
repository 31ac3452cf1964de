"""
Capability Input Normalization
==============================

Resolves the three accepted capability inputs (raw mapping, builder,
frozen capability set) into a single builder type at the provider
boundary, so provider code only ever works with
:class:`~harness.capabilities.builder.CapabilityBuilder`.
"""

from collections.abc import Mapping
from typing import Any, Optional, Union

from harness.capabilities.builder import (
    APPIUM_PREFIX,
    CapabilityBuilder,
    CapabilitySet,
    Platform,
)
from harness.exceptions import CapabilityError

# Accepted capability input shapes
CapsInput = Union[CapabilityBuilder, CapabilitySet, Mapping[str, Any]]


def _platform_field(caps: Mapping[str, Any]) -> str:
    """Read platformName, falling back to appium:platformName."""
    for key in ("platformName", f"{APPIUM_PREFIX}:platformName"):
        value = caps.get(key)
        if isinstance(value, str):
            return value.strip().lower()
    return ""


def detect_platform(capabilities: Optional[CapsInput]) -> Platform:
    """
    Classify a capability-like input as Android or iOS.

    Args:
        capabilities: Raw mapping, capability set, builder, or None.

    Returns:
        Platform.IOS when the platform name mentions "ios" (any case),
        Platform.ANDROID otherwise.
    """
    if isinstance(capabilities, CapabilityBuilder):
        capabilities = capabilities.snapshot()
    if not isinstance(capabilities, Mapping):
        return Platform.ANDROID
    return Platform.IOS if "ios" in _platform_field(capabilities) else Platform.ANDROID


def normalize_to_builder(caps_input: CapsInput, platform: Platform) -> CapabilityBuilder:
    """
    Coerce any accepted capability input into a builder.

    Builders pass through unchanged. Capability sets and raw mappings are
    merged onto a freshly seeded builder for ``platform``.

    Raises:
        CapabilityError: If the input is none of the accepted shapes.
    """
    if isinstance(caps_input, CapabilityBuilder):
        return caps_input

    if isinstance(caps_input, CapabilitySet):
        source: Mapping[str, Any] = caps_input.to_dict()
    elif isinstance(caps_input, Mapping):
        source = caps_input
    else:
        raise CapabilityError(
            f"Unsupported capability input: {type(caps_input).__name__}; "
            "expected a mapping, CapabilitySet or CapabilityBuilder"
        )

    builder = CapabilityBuilder.for_platform(platform)
    for key, value in source.items():
        builder.option(key, value)
    return builder


def to_capability_object(builder: CapabilityBuilder, mutable: bool = True) -> dict[str, Any]:
    """
    Finalize a builder into the dict a provider sends over the wire.

    Args:
        builder: Builder to finalize.
        mutable: Shallow copy of the working map when True, otherwise a
            deep copy of the frozen snapshot.
    """
    if mutable:
        return builder.build_mutable()
    return builder.build().to_dict()


def merge_vendor_defaults(
    builder: CapabilityBuilder,
    ns: str,
    defaults: Mapping[str, Any],
) -> CapabilityBuilder:
    """
    Merge provider defaults into a vendor namespace; caller values still win.

    Defaults whose value is None are dropped so optional fields (tunnel
    identifiers) never appear unset on the wire.
    """
    present = {k: v for k, v in defaults.items() if v is not None}
    return builder.merge_vendor_namespace(ns, present)
