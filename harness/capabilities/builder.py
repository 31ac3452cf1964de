"""
Capability Builder
==================

Fluent builder for Appium/WebDriver capabilities.

A builder owns one mutable working map seeded with the platform's
mandatory defaults. Chained setters write platform keys under the
``appium:`` prefix; vendor namespaces such as ``bstack:options`` are
merged rather than replaced, and the values already present win over
merged-in defaults.

Usage:
    from harness.capabilities import CapabilityBuilder

    caps = (
        CapabilityBuilder.android()
        .device_name("Pixel_8")
        .platform_version("14.0")
        .app("/path/to/app.apk")
        .build()
    )
"""

import copy
import json
import os
from collections.abc import Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from harness.exceptions import CapabilityError
from harness.utils.logger import get_logger

logger = get_logger(__name__)

APPIUM_PREFIX = "appium"


class Platform(Enum):
    """Target mobile platform."""

    ANDROID = "android"
    IOS = "ios"

    @property
    def platform_name(self) -> str:
        """Value sent as ``platformName``."""
        return "iOS" if self is Platform.IOS else "Android"

    @property
    def default_automation(self) -> str:
        """Default Appium automation backend."""
        return "XCUITest" if self is Platform.IOS else "UiAutomator2"

    @property
    def automation_names(self) -> tuple[str, ...]:
        """Automation backends accepted for this platform."""
        if self is Platform.IOS:
            return ("XCUITest",)
        return ("UiAutomator2", "Espresso")


def _freeze(value: Any) -> Any:
    """Recursively expose nested mappings read-only and sequences as tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Inverse of _freeze: plain dicts and lists all the way down."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return copy.deepcopy(value)


def _parse_env_object(name: str) -> Optional[dict[str, Any]]:
    """Parse a JSON object from an environment variable; None when unusable."""
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.debug("Ignoring malformed capability JSON", env_var=name)
        return None
    if not isinstance(parsed, dict):
        logger.debug("Ignoring non-object capability JSON", env_var=name)
        return None
    return parsed


class CapabilitySet(Mapping):
    """
    Immutable capability mapping produced by :meth:`CapabilityBuilder.build`.

    Nested mappings (vendor namespaces) are exposed as read-only views
    and nested lists as tuples.
    Use :meth:`to_dict` to get a plain dict suitable for JSON encoding.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = {k: _freeze(_thaw(v)) for k, v in data.items()}

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"CapabilitySet({self.to_dict()!r})"

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.__slots__ and not hasattr(self, name):
            object.__setattr__(self, name, value)
            return
        raise AttributeError("CapabilitySet is immutable")

    def to_dict(self) -> dict[str, Any]:
        """Return a deep, mutable copy of the capabilities."""
        return {k: _thaw(v) for k, v in self._data.items()}


class CapabilityBuilder:
    """
    Fluent builder for constructing Appium/WebDriver capabilities.

    Every setter returns the builder so calls can be chained. The
    terminal operations are :meth:`build` (immutable snapshot) and
    :meth:`build_mutable` (shallow dict copy).
    """

    def __init__(self, base: Optional[Mapping[str, Any]] = None) -> None:
        """
        Initialize a builder over a copy of ``base``.

        Prefer :meth:`for_platform`, :meth:`android` or :meth:`ios`,
        which seed the mandatory platform defaults.
        """
        self._caps: dict[str, Any] = dict(base or {})

    # ── Factories ─────────────────────────────────────────────────

    @classmethod
    def for_platform(
        cls,
        platform: Platform,
        automation_name: Optional[str] = None,
    ) -> "CapabilityBuilder":
        """
        Create a builder seeded with the platform's mandatory defaults.

        Args:
            platform: Target platform.
            automation_name: Appium automation backend (platform default if omitted).

        Raises:
            CapabilityError: If the automation backend is not valid for the platform.
        """
        automation = automation_name or platform.default_automation
        if automation not in platform.automation_names:
            raise CapabilityError(
                f"Automation '{automation}' is not supported on {platform.platform_name}; "
                f"expected one of {', '.join(platform.automation_names)}"
            )
        return cls(
            {
                "platformName": platform.platform_name,
                f"{APPIUM_PREFIX}:automationName": automation,
            }
        )

    @classmethod
    def android(cls, automation_name: str = "UiAutomator2") -> "CapabilityBuilder":
        """Android base (UiAutomator2 by default, Espresso allowed)."""
        return cls.for_platform(Platform.ANDROID, automation_name)

    @classmethod
    def ios(cls, automation_name: str = "XCUITest") -> "CapabilityBuilder":
        """iOS base (XCUITest)."""
        return cls.for_platform(Platform.IOS, automation_name)

    # ── Common ────────────────────────────────────────────────────

    def platform_version(self, value: str) -> "CapabilityBuilder":
        """Platform version (e.g. "14.0")."""
        return self.appium("platformVersion", value)

    def device_name(self, value: str) -> "CapabilityBuilder":
        """Device name (e.g. "Pixel_8")."""
        return self.appium("deviceName", value)

    def udid(self, value: str) -> "CapabilityBuilder":
        """Device UDID (physical devices)."""
        return self.appium("udid", value)

    def orientation(self, value: str) -> "CapabilityBuilder":
        """Device orientation: PORTRAIT or LANDSCAPE."""
        value = value.upper()
        if value not in ("PORTRAIT", "LANDSCAPE"):
            raise CapabilityError(f"Invalid orientation: {value}")
        return self.appium("orientation", value)

    def language(self, value: str) -> "CapabilityBuilder":
        return self.appium("language", value)

    def locale(self, value: str) -> "CapabilityBuilder":
        return self.appium("locale", value)

    def no_reset(self, value: bool = True) -> "CapabilityBuilder":
        """Keep app state between sessions."""
        return self.appium("noReset", value)

    def full_reset(self, value: bool = True) -> "CapabilityBuilder":
        """Reinstall the app between sessions."""
        return self.appium("fullReset", value)

    # ── Native app ────────────────────────────────────────────────

    def app(self, path: str) -> "CapabilityBuilder":
        """Path, URL or cloud storage id of the app under test."""
        return self.appium("app", path)

    def bundle_id(self, value: str) -> "CapabilityBuilder":
        """iOS bundle identifier."""
        return self.appium("bundleId", value)

    def app_package(self, value: str) -> "CapabilityBuilder":
        """Android app package name."""
        return self.appium("appPackage", value)

    def app_activity(self, value: str) -> "CapabilityBuilder":
        """Android launch activity."""
        return self.appium("appActivity", value)

    # ── Mobile web ────────────────────────────────────────────────

    def browser_name(self, value: str) -> "CapabilityBuilder":
        """Browser for mobile web testing (Chrome, Chromium, Safari, ...)."""
        return self.option("browserName", value)

    # ── Arbitrary keys ────────────────────────────────────────────

    def option(self, key: str, value: Any) -> "CapabilityBuilder":
        """Set any raw top-level capability key."""
        self._caps[key] = value
        return self

    def namespaced_option(self, prefix: str, key: str, value: Any) -> "CapabilityBuilder":
        """Set ``prefix:key``."""
        self._caps[f"{prefix}:{key}"] = value
        return self

    def appium(self, key: str, value: Any) -> "CapabilityBuilder":
        """Set an ``appium:``-namespaced key."""
        return self.namespaced_option(APPIUM_PREFIX, key, value)

    def set_if(self, key: str, value: Any) -> "CapabilityBuilder":
        """Set ``key`` only when ``value`` is not None."""
        if value is not None:
            self._caps[key] = value
        return self

    def unset(self, key: str) -> "CapabilityBuilder":
        """Remove ``key`` if present."""
        self._caps.pop(key, None)
        return self

    # ── Merging ───────────────────────────────────────────────────

    def merge_object(self, obj: Mapping[str, Any]) -> "CapabilityBuilder":
        """Shallow-merge ``obj``; its keys override existing ones."""
        self._caps.update(obj)
        return self

    def merge_vendor_namespace(self, ns: str, obj: Mapping[str, Any]) -> "CapabilityBuilder":
        """
        Merge ``obj`` into the nested mapping stored at ``ns``.

        Sibling keys already under ``ns`` are kept and, on conflict, the
        existing value wins: merged values only fill gaps.

        Args:
            ns: Vendor namespace key (e.g. ``bstack:options``).
            obj: Values to merge in.
        """
        current = self._caps.get(ns)
        existing = dict(current) if isinstance(current, Mapping) else {}
        self._caps[ns] = {**obj, **existing}
        return self

    def merge_from_env_variable(self, name: str) -> "CapabilityBuilder":
        """Merge a JSON object read from environment variable ``name``."""
        parsed = _parse_env_object(name)
        if parsed is not None:
            self.merge_object(parsed)
        return self

    def merge_vendor_from_env_variable(self, ns: str, name: str) -> "CapabilityBuilder":
        """Merge a JSON object from ``name`` into vendor namespace ``ns``."""
        parsed = _parse_env_object(name)
        if parsed is not None:
            self.merge_vendor_namespace(ns, parsed)
        return self

    # ── Read access ───────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        """Read a key from the working map without finalizing."""
        return self._caps.get(key, default)

    def snapshot(self) -> Mapping[str, Any]:
        """Read-only view of the working map."""
        return MappingProxyType(self._caps)

    # ── Terminal operations ───────────────────────────────────────

    def build(self) -> CapabilitySet:
        """Final immutable capabilities."""
        return CapabilitySet(self._caps)

    def build_mutable(self) -> dict[str, Any]:
        """Mutable shallow copy for callers that must keep tweaking keys."""
        return dict(self._caps)

    def __repr__(self) -> str:
        return f"CapabilityBuilder({self._caps!r})"
