"""
Tests for Engine Adapters
=========================

Tests for:
- Adapter registry and kinds
- Lifecycle: one-shot init/bind, use before start, idempotent teardown
- WebEngineAdapter over a mocked Playwright
- MobileDriverAdapter over a mocked RemoteSession
"""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from harness.adapters import (
    AdapterKind,
    AdapterState,
    MobileDriverAdapter,
    WebEngineAdapter,
    create_adapter,
    to_locator,
)
from harness.adapters.base import Adapter
from harness.exceptions import (
    ActionParameterError,
    AdapterBindError,
    AdapterStateError,
    ConfigurationError,
    UnsupportedActionError,
)
from harness.providers import RemoteSession


def make_page(browser=True) -> MagicMock:
    """Mock Playwright page whose context (and browser) resolve like the real API."""
    locator = MagicMock()
    for name in ("click", "fill", "press_sequentially", "wait_for"):
        setattr(locator, name, AsyncMock())
    locator.text_content = AsyncMock(return_value="Hello")

    page = MagicMock()
    page.locator = MagicMock(return_value=locator)
    page.goto = AsyncMock()
    page.title = AsyncMock(return_value="Example Domain")
    page.url = "https://example.com/"
    page.screenshot = AsyncMock(return_value=b"png")
    page.close = AsyncMock()
    page.context.close = AsyncMock()
    page.context.browser = MagicMock() if browser else None
    if browser:
        page.context.browser.close = AsyncMock()
    return page


@pytest.fixture
def page() -> MagicMock:
    return make_page()


@pytest.fixture
def playwright_mock(page):
    """Patch async_playwright(); yields the started Playwright mock."""
    browser = page.context.browser
    browser.new_context = AsyncMock(return_value=page.context)
    page.context.new_page = AsyncMock(return_value=page)

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.firefox.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    manager = MagicMock()
    manager.start = AsyncMock(return_value=playwright)
    with patch("harness.adapters.playwright.async_playwright", return_value=manager):
        yield playwright


@pytest.fixture
def driver() -> MagicMock:
    """Mock RemoteSession with the commands the mobile adapter uses."""
    session = MagicMock(spec=RemoteSession)
    session.session_id = "sess-1"
    session.closed = False
    session.capabilities = {"platformName": "Android"}
    session.find_element = AsyncMock(return_value="el-1")
    session.click_element = AsyncMock()
    session.clear_element = AsyncMock()
    session.send_keys = AsyncMock()
    session.element_text = AsyncMock(return_value="Welcome")
    session.element_displayed = AsyncMock(return_value=True)
    session.command = AsyncMock()
    session.navigate_to = AsyncMock()
    session.title = AsyncMock(return_value="Home")
    session.current_url = AsyncMock(return_value="app://home")
    session.screenshot = AsyncMock(return_value=base64.b64encode(b"png-bytes").decode())
    session.execute_script = AsyncMock()
    session.close = AsyncMock()
    return session


class TestRegistry:
    def test_create_by_kind(self):
        assert isinstance(create_adapter(AdapterKind.WEB_ENGINE), WebEngineAdapter)
        assert isinstance(create_adapter("mobile-driver"), MobileDriverAdapter)

    def test_fresh_instance_each_time(self):
        assert create_adapter("web-engine") is not create_adapter("web-engine")

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            create_adapter("desktop")

    def test_starts_unbound(self):
        assert create_adapter(AdapterKind.MOBILE_DRIVER).state is AdapterState.UNBOUND

    def test_incomplete_handler_table_rejected(self):
        with pytest.raises(TypeError, match="url"):
            class BrokenAdapter(WebEngineAdapter):
                handlers = {
                    k: v for k, v in WebEngineAdapter.handlers.items() if k.value != "url"
                }

    def test_abstract_base_skips_check(self):
        class Intermediate(Adapter):
            pass

        assert Intermediate.__name__ == "Intermediate"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_execute_before_start(self):
        adapter = create_adapter(AdapterKind.WEB_ENGINE)
        with pytest.raises(AdapterStateError, match="not started"):
            await adapter.execute("title")

    @pytest.mark.asyncio
    async def test_teardown_before_start_is_noop(self):
        adapter = create_adapter(AdapterKind.MOBILE_DRIVER)
        await adapter.teardown()
        assert adapter.state is AdapterState.TORN_DOWN

    @pytest.mark.asyncio
    async def test_double_teardown(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        await adapter.teardown()
        await adapter.teardown()
        driver.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_use_after_teardown(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        await adapter.teardown()
        with pytest.raises(AdapterStateError, match="torn down"):
            await adapter.execute("title")

    @pytest.mark.asyncio
    async def test_bind_is_one_shot(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        with pytest.raises(AdapterStateError):
            await adapter.bind(driver)

    @pytest.mark.asyncio
    async def test_unsupported_action(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        with pytest.raises(UnsupportedActionError, match='unsupported action "swipe"'):
            await adapter.execute("swipe")


class TestWebEngineAdapter:
    @pytest.mark.asyncio
    async def test_init_launches_browser(self, playwright_mock, page):
        adapter = WebEngineAdapter()
        await adapter.init({"browser": "firefox", "headless": True})

        playwright_mock.firefox.launch.assert_awaited_once_with(headless=True)
        assert adapter.page is page
        assert adapter.is_bound

    @pytest.mark.asyncio
    async def test_init_unknown_browser(self):
        with pytest.raises(ConfigurationError):
            await WebEngineAdapter().init({"browser": "netscape"})

    @pytest.mark.asyncio
    async def test_teardown_closes_everything(self, playwright_mock, page):
        adapter = WebEngineAdapter()
        await adapter.init()
        await adapter.teardown()

        page.close.assert_awaited_once()
        page.context.close.assert_awaited_once()
        page.context.browser.close.assert_awaited_once()
        playwright_mock.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_teardown_continues_past_failures(self, playwright_mock, page):
        page.close.side_effect = RuntimeError("page crashed")
        adapter = WebEngineAdapter()
        await adapter.init()
        await adapter.teardown()

        page.context.close.assert_awaited_once()
        page.context.browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bind_page(self, page):
        adapter = WebEngineAdapter()
        await adapter.bind({"page": page})
        assert adapter.page is page

    @pytest.mark.asyncio
    async def test_bind_page_without_browser(self):
        with pytest.raises(AdapterBindError, match="page has no browser"):
            await WebEngineAdapter().bind({"page": make_page(browser=False)})

    @pytest.mark.asyncio
    async def test_bind_context_without_browser(self):
        context = MagicMock()
        context.browser = None
        with pytest.raises(AdapterBindError, match="context has no browser"):
            await WebEngineAdapter().bind({"context": context})

    @pytest.mark.asyncio
    async def test_bind_rejects_empty_and_unknown(self):
        with pytest.raises(AdapterBindError):
            await WebEngineAdapter().bind({})
        with pytest.raises(AdapterBindError):
            await WebEngineAdapter().bind({"driver": object()})
        with pytest.raises(AdapterBindError):
            await WebEngineAdapter().bind("page")

    @pytest.mark.asyncio
    async def test_actions(self, page):
        adapter = WebEngineAdapter()
        await adapter.bind({"page": page})
        locator = page.locator.return_value

        await adapter.navigate("https://example.com")
        await adapter.execute("click", {"selector": "#go"})
        await adapter.execute("fill", {"selector": "#q", "value": "harness"})
        await adapter.execute("type", {"selector": "#q", "text": "slow", "delay": 50})

        page.goto.assert_awaited_once_with("https://example.com", wait_until="domcontentloaded")
        locator.click.assert_awaited_once()
        locator.fill.assert_awaited_once_with("harness")
        locator.press_sequentially.assert_awaited_once_with("slow", delay=50)
        assert await adapter.execute("getText", {"selector": "h1"}) == "Hello"
        assert await adapter.execute("waitForSelector", {"selector": "h1"}) is True
        assert await adapter.execute("screenshot") == b"png"
        assert await adapter.execute("title") == "Example Domain"
        assert await adapter.execute("url") == "https://example.com/"

    @pytest.mark.asyncio
    async def test_missing_selector(self, page):
        adapter = WebEngineAdapter()
        await adapter.bind({"page": page})
        with pytest.raises(ActionParameterError, match="selector"):
            await adapter.execute("click", {})

    @pytest.mark.asyncio
    async def test_millisecond_param_spellings(self, page):
        adapter = WebEngineAdapter()
        await adapter.bind({"page": page})
        locator = page.locator.return_value

        await adapter.execute("type", {"selector": "#q", "text": "slow", "delayMs": 25})
        await adapter.execute("waitForSelector", {"selector": "h1", "timeoutMs": 1500})

        locator.press_sequentially.assert_awaited_once_with("slow", delay=25)
        locator.wait_for.assert_awaited_once_with(state="visible", timeout=1500)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", ["fast", -5, True])
    async def test_invalid_delay_rejected(self, page, bad):
        adapter = WebEngineAdapter()
        await adapter.bind({"page": page})
        with pytest.raises(ActionParameterError, match="delayMs"):
            await adapter.execute("type", {"selector": "#q", "text": "x", "delayMs": bad})


class TestToLocator:
    @pytest.mark.parametrize(
        "selector, expected",
        [
            ("~login", ("accessibility id", "login")),
            ("//android.widget.Button", ("xpath", "//android.widget.Button")),
            ("(//button)[2]", ("xpath", "(//button)[2]")),
            ("xpath=//a", ("xpath", "//a")),
            ("id=com.app:id/ok", ("id", "com.app:id/ok")),
            ("-android uiautomator:new UiSelector()", ("-android uiautomator", "new UiSelector()")),
            ("-ios predicate string:name == 'ok'", ("-ios predicate string", "name == 'ok'")),
            ("-ios class chain:**/XCUIElementTypeButton", ("-ios class chain", "**/XCUIElementTypeButton")),
            ("button.primary", ("css selector", "button.primary")),
        ],
    )
    def test_strategies(self, selector, expected):
        assert to_locator(selector) == expected


class TestMobileDriverAdapter:
    @pytest.mark.asyncio
    async def test_init_requires_capabilities(self):
        with pytest.raises(ConfigurationError, match="capabilities"):
            await MobileDriverAdapter().init({"hostname": "localhost"})

    @pytest.mark.asyncio
    async def test_init_opens_session(self, driver):
        with patch(
            "harness.adapters.appium.open_remote_session",
            new=AsyncMock(return_value=driver),
        ) as open_session:
            adapter = MobileDriverAdapter()
            await adapter.init({"capabilities": {"platformName": "Android"}, "port": 4724})

        connection, caps = open_session.call_args.args
        assert connection.port == 4724
        assert caps == {"platformName": "Android"}
        assert adapter.session is driver

    @pytest.mark.asyncio
    async def test_bind_accepts_driver_mapping(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind({"driver": driver})
        assert adapter.session is driver

    @pytest.mark.asyncio
    async def test_bind_rejects_wrong_shape(self):
        with pytest.raises(AdapterBindError):
            await MobileDriverAdapter().bind({"page": object()})

    @pytest.mark.asyncio
    async def test_bind_rejects_closed_session(self, driver):
        driver.closed = True
        with pytest.raises(AdapterBindError, match="closed"):
            await MobileDriverAdapter().bind(driver)

    @pytest.mark.asyncio
    async def test_tap_and_set_value(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        await adapter.execute("tap", {"selector": "~login"})
        await adapter.execute("setValue", {"selector": "id=user", "value": "ada"})

        driver.find_element.assert_any_await("accessibility id", "login")
        driver.find_element.assert_any_await("id", "user")
        driver.click_element.assert_awaited_once_with("el-1")
        driver.clear_element.assert_awaited_once_with("el-1")
        driver.send_keys.assert_awaited_once_with("el-1", "ada")

    @pytest.mark.asyncio
    async def test_reads(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        assert await adapter.execute("getText", {"selector": "~title"}) == "Welcome"
        assert await adapter.execute("title") == "Home"
        assert await adapter.execute("url") == "app://home"
        assert await adapter.execute("screenshot") == b"png-bytes"

    @pytest.mark.asyncio
    async def test_screenshot_to_file(self, driver, tmp_path):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        target = tmp_path / "shot.png"

        await adapter.execute("screenshot", {"path": str(target)})

        assert target.read_bytes() == b"png-bytes"

    @pytest.mark.asyncio
    async def test_wait_for_element_sets_and_restores_implicit_wait(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        assert await adapter.execute("waitForElement", {"selector": "~ok", "timeout": 3000}) is True

        timeouts = [c.args[2] for c in driver.command.await_args_list]
        assert timeouts == [{"implicit": 3000}, {"implicit": 0}]

    @pytest.mark.asyncio
    async def test_wait_for_element_timeout_spellings(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        await adapter.execute("waitForElement", {"selector": "~ok", "timeoutMs": 2500})
        await adapter.execute("waitForElement", {"selector": "~ok", "timeout": None})

        timeouts = [c.args[2] for c in driver.command.await_args_list]
        assert timeouts == [
            {"implicit": 2500},
            {"implicit": 0},
            {"implicit": 10000},
            {"implicit": 0},
        ]

    @pytest.mark.asyncio
    async def test_wait_for_element_bad_timeout(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        with pytest.raises(ActionParameterError, match="timeoutMs"):
            await adapter.execute("waitForElement", {"selector": "~ok", "timeoutMs": "soon"})
        driver.command.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_launch_and_terminate_app(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        await adapter.execute("launchApp", {"appId": "com.example"})
        await adapter.execute("terminateApp", {"appId": "com.example"})

        scripts = [c.args for c in driver.execute_script.await_args_list]
        assert scripts == [
            ("mobile: activateApp", [{"appId": "com.example"}]),
            ("mobile: terminateApp", [{"appId": "com.example"}]),
        ]

    @pytest.mark.asyncio
    async def test_ios_uses_bundle_id(self, driver):
        driver.capabilities = {"platformName": "iOS"}
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)

        await adapter.execute("launchApp", {"appId": "com.example"})

        assert driver.execute_script.await_args.args[1] == [{"bundleId": "com.example"}]

    @pytest.mark.asyncio
    async def test_launch_app_requires_id(self, driver):
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        with pytest.raises(ActionParameterError, match="appId"):
            await adapter.execute("launchApp")

    @pytest.mark.asyncio
    async def test_teardown_swallows_close_errors(self, driver):
        driver.close.side_effect = RuntimeError("session already gone")
        adapter = MobileDriverAdapter()
        await adapter.bind(driver)
        await adapter.teardown()
        assert adapter.state is AdapterState.TORN_DOWN
