"""In-memory stand-ins for the parts of Playwright the login pipeline touches.

Frames answer the JavaScript probes from espn_session.dom out of a list of
FakeNode objects, so a page fixture is just a list of nodes plus callbacks.
"""

import inspect
import itertools

from playwright.async_api import Error as PlaywrightError

from espn_session import dom
from espn_session.strategies import (
    BUTTON_SELECTOR,
    INPUT_SELECTOR,
    SUBMIT_SELECTOR,
    TRIGGER_SELECTOR,
)

LOGIN_URL = "https://www.espn.com/login"

_tokens = itertools.count(1)


def matches(node, selector):
    if selector == INPUT_SELECTOR:
        return node.tag == "input"
    if selector == SUBMIT_SELECTOR:
        return node.tag in ("button", "input") and node.type == "submit"
    if selector == BUTTON_SELECTOR:
        return (
            node.tag == "button"
            or (node.tag == "input" and node.type in ("submit", "button"))
            or node.role == "button"
        )
    if selector == TRIGGER_SELECTOR:
        return node.tag in ("a", "button") or node.role == "button"
    return selector in node.selectors


async def _call(callback):
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class FakeNode:
    def __init__(
        self,
        tag,
        type="",
        name="",
        id="",
        className="",
        placeholder="",
        autocomplete="",
        text="",
        href="",
        role="",
        visible=True,
        selectors=(),
        on_click=None,
    ):
        self.tag = tag
        self.type = type
        self.name = name
        self.id = id
        self.className = className
        self.placeholder = placeholder
        self.autocomplete = autocomplete
        self.text = text
        self.href = href
        self.role = role
        self.visible = visible
        self.selectors = tuple(selectors)
        self.on_click = on_click
        self.value = ""
        self.clicks = 0
        self.token = f"e{next(_tokens)}"

    def snapshot(self, index):
        return {
            "index": index,
            "token": self.token,
            "tag": self.tag,
            "type": self.type,
            "name": self.name,
            "id": self.id,
            "className": self.className,
            "placeholder": self.placeholder,
            "autocomplete": self.autocomplete,
            "ariaLabel": "",
            "value": self.value if self.tag == "input" else "",
            "href": self.href,
            "text": self.text,
            "visible": self.visible,
        }

    # Locator API
    async def click(self, position=None):
        self.clicks += 1
        await _call(self.on_click)

    async def fill(self, value):
        self.value = value

    async def press_sequentially(self, text):
        self.value += text

    async def bounding_box(self):
        return None


class FakeLocator:
    """Selector locator; like Playwright's, it also matches nodes in shadow roots."""

    def __init__(self, frame, selector):
        self.frame = frame
        self.selector = selector

    def nth(self, index):
        shadow = [n for n in self.frame.shadow_nodes if matches(n, self.selector)]
        return (shadow + self.frame.matched(self.selector))[index]


class FakeFrame:
    def __init__(self, url=LOGIN_URL, nodes=None, text="", name="", shadow_nodes=None):
        self.url = url
        self.name = name
        self.nodes = list(nodes or [])
        # Reachable by locators but invisible to document.querySelectorAll
        self.shadow_nodes = list(shadow_nodes or [])
        self.text = text
        self.hooks = {}
        self.event_targets = 0
        self.leagues = []
        self.injected = False
        self.on_injected_submit = None
        self.detached = False
        self.scripts = []

    def matched(self, selector):
        return [n for n in self.nodes if matches(n, selector)]

    def locator(self, selector):
        for node in self.shadow_nodes + self.nodes:
            if selector == dom.target_selector(node.token):
                return node
        return FakeLocator(self, selector)

    async def evaluate(self, script, arg=None):
        self.scripts.append(script)
        if self.detached:
            raise PlaywrightError("Frame was detached")
        if script is dom.ELEMENTS_JS:
            return [node.snapshot(i) for i, node in enumerate(self.matched(arg))]
        if script is dom.BODY_TEXT_JS:
            return self.text
        if script is dom.CALL_HOOKS_JS:
            for path in arg:
                if path in self.hooks:
                    await _call(self.hooks[path])
                    return path
            return None
        if script is dom.DISPATCH_EVENTS_JS:
            return self.event_targets
        if script is dom.INJECT_FORM_JS:
            self.injected = True
            self.nodes += [
                FakeNode("input", type="email", name="email"),
                FakeNode("input", type="password", name="password"),
                FakeNode("button", type="submit", text="Log In", on_click=self.on_injected_submit),
            ]
            return True
        if script is dom.LEAGUES_JS:
            if isinstance(self.leagues, Exception):
                raise self.leagues
            return self.leagues
        raise AssertionError(f"unexpected script: {script[:40]}")


class FakeContext:
    def __init__(self, page_factory=None, browser=None, options=None):
        self.page_factory = page_factory
        self.browser = browser
        self.options = options or {}
        self.cookie_jar = []
        self.close_calls = 0
        self.default_timeout = None

    def add_cookie(self, name, value, domain=".espn.com"):
        self.cookie_jar.append({"name": name, "value": value, "domain": domain, "path": "/"})

    async def cookies(self):
        return [dict(c) for c in self.cookie_jar]

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def new_page(self):
        page = self.page_factory(self)
        page.context = self
        if self.browser:
            self.browser.track(page)
        return page

    async def close(self):
        self.close_calls += 1


class FakePage:
    def __init__(self, main_frame=None, child_frames=(), context=None):
        self.main_frame = main_frame or FakeFrame()
        self.child_frames = list(child_frames)
        self.context = context or FakeContext()
        self.navigations = []
        self.on_goto = {}
        self.close_calls = 0
        self.on_close = None
        self.init_scripts = []

    @property
    def frames(self):
        return [self.main_frame] + self.child_frames

    @property
    def url(self):
        return self.main_frame.url

    @url.setter
    def url(self, value):
        self.main_frame.url = value

    async def goto(self, url, wait_until=None, timeout=None):
        self.navigations.append(url)
        self.url = url
        await _call(self.on_goto.get(url))

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def close(self):
        self.close_calls += 1
        if self.on_close:
            self.on_close()


class FakeBrowser:
    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.connected = True
        self.close_calls = 0
        self.pages = []
        self.live = 0
        self.max_live = 0

    def is_connected(self):
        return self.connected

    def track(self, page):
        self.pages.append(page)
        self.live += 1
        self.max_live = max(self.max_live, self.live)

        def closed():
            self.live -= 1

        page.on_close = closed

    async def new_context(self, **options):
        return FakeContext(self.page_factory, self, options)

    async def close(self):
        self.close_calls += 1
        self.connected = False


class FakeChromium:
    def __init__(self, page_factory, fail=False):
        self.page_factory = page_factory
        self.fail = fail
        self.launches = []
        self.browsers = []

    async def launch(self, **kwargs):
        if self.fail:
            raise PlaywrightError("Executable doesn't exist at /nowhere/chrome")
        self.launches.append(kwargs)
        browser = FakeBrowser(self.page_factory)
        self.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, page_factory, fail=False):
        self.chromium = FakeChromium(page_factory, fail)
        self.stopped = False

    async def start(self):
        return self

    async def stop(self):
        self.stopped = True


# ------------------------------------------------------------------
# Page fixtures
# ------------------------------------------------------------------

def search_box():
    return FakeNode("input", type="email", name="q", placeholder="Search Sports, Teams or Players")


def single_step_page(context=None, outcome="success"):
    """Inline email + password form.

    outcome: "success" navigates and sets both cookies, "fuzzy" navigates and
    sets differently named cookies, "invalid" shows an error message, "hang"
    does nothing.
    """
    page = FakePage(context=context)
    frame = page.main_frame

    def submit():
        if outcome in ("success", "fuzzy"):
            page.url = "https://www.espn.com/"
            if outcome == "success":
                page.context.add_cookie("espn_s2", "AEC-s2-token")
                page.context.add_cookie("SWID", "{1234-ABCD}")
            else:
                page.context.add_cookie("session_token", "AEC-s2-token")
                page.context.add_cookie("user_id", "{1234-ABCD}")
        elif outcome == "invalid":
            frame.text = "The credentials you entered are incorrect. Invalid password."

    frame.nodes = [
        search_box(),
        FakeNode("input", type="email", name="email", placeholder="Username or Email Address"),
        FakeNode("input", type="password", name="password", placeholder="Password"),
        FakeNode("button", type="submit", text="Log In", on_click=submit),
    ]
    return page


def multi_step_page(context=None):
    """Email first; Continue renders the password step inside the same frame."""
    page = FakePage(context=context)
    frame = page.main_frame

    def submit():
        page.url = "https://www.espn.com/"
        page.context.add_cookie("espn_s2", "AEC-s2-token")
        page.context.add_cookie("SWID", "{1234-ABCD}")

    def show_password():
        frame.nodes[-1].visible = False
        frame.nodes += [
            FakeNode("input", type="password", name="password"),
            FakeNode("button", type="submit", text="Log In", on_click=submit),
        ]

    frame.nodes = [
        FakeNode("input", type="email", name="email"),
        FakeNode("button", type="button", text="Continue", on_click=show_password),
    ]
    return page


def modal_page(context=None):
    """Login form hidden until the header's "Log In" link is clicked."""
    page = FakePage(context=context)
    frame = page.main_frame
    def submit():
        page.url = "https://www.espn.com/"
        page.context.add_cookie("espn_s2", "AEC-s2-token")
        page.context.add_cookie("SWID", "{1234-ABCD}")

    modal = [
        FakeNode("input", type="email", name="email", visible=False),
        FakeNode("input", type="password", name="password", visible=False),
        FakeNode("button", type="submit", text="Log In", visible=False, on_click=submit),
    ]

    def open_modal():
        for node in modal:
            node.visible = True

    frame.nodes = [
        search_box(),
        FakeNode("a", text="Log In", href="#", on_click=open_modal),
        *modal,
    ]
    return page
