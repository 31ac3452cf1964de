"""
Capabilities Module
===================

Capability construction and normalization.

This package contains:
    - builder: Platform, CapabilityBuilder and the immutable CapabilitySet
    - normalize: Platform detection and input coercion for providers
"""

from harness.capabilities.builder import CapabilityBuilder, CapabilitySet, Platform
from harness.capabilities.normalize import (
    CapsInput,
    detect_platform,
    merge_vendor_defaults,
    normalize_to_builder,
    to_capability_object,
)

__all__ = [
    "CapabilityBuilder",
    "CapabilitySet",
    "CapsInput",
    "Platform",
    "detect_platform",
    "merge_vendor_defaults",
    "normalize_to_builder",
    "to_capability_object",
]
