"""JavaScript probes evaluated inside page frames.

Every probe returns plain JSON data; the matching decisions are made in Python
(see strategies.py) so they can be tested without a browser.
"""

from playwright.async_api import Frame

# Every element a probe reports is stamped with this attribute so the element
# that passed the checks is the one acted on. Playwright's CSS locators pierce
# shadow roots while querySelectorAll does not, so positions are not reliable.
TARGET_ATTR = "data-espn-session-id"

# Attribute snapshot for every element matching a selector, in document order.
ELEMENTS_JS = """(selector) => {
    const isVisible = (el) => {
        const style = window.getComputedStyle(el);
        if (style.visibility === 'hidden' || style.display === 'none') return false;
        if (el.type === 'hidden') return false;
        const rect = el.getBoundingClientRect();
        return rect.width > 0 && rect.height > 0;
    };
    const stamp = (el) => {
        let token = el.getAttribute('""" + TARGET_ATTR + """');
        if (!token) {
            window.__espnSessionSeq = (window.__espnSessionSeq || 0) + 1;
            token = 'e' + window.__espnSessionSeq;
            el.setAttribute('""" + TARGET_ATTR + """', token);
        }
        return token;
    };
    return Array.from(document.querySelectorAll(selector)).map((el, index) => ({
        index,
        token: stamp(el),
        tag: el.tagName.toLowerCase(),
        type: (el.getAttribute('type') || '').toLowerCase(),
        name: el.getAttribute('name') || '',
        id: el.id || '',
        className: typeof el.className === 'string' ? el.className : '',
        placeholder: el.getAttribute('placeholder') || '',
        autocomplete: el.getAttribute('autocomplete') || '',
        ariaLabel: el.getAttribute('aria-label') || '',
        value: el.tagName === 'INPUT' ? (el.value || '') : '',
        href: el.getAttribute('href') || '',
        text: (el.innerText || el.textContent || '').trim().slice(0, 200),
        visible: isVisible(el),
    }));
}"""

BODY_TEXT_JS = """() => document.body ? (document.body.innerText || '') : ''"""

# Calls the first dotted path on window that resolves to a function.
CALL_HOOKS_JS = """(paths) => {
    for (const path of paths) {
        let owner = window;
        let target = window;
        for (const part of path.split('.')) {
            if (target === undefined || target === null) break;
            owner = target;
            target = target[part];
        }
        if (typeof target === 'function') {
            try {
                target.call(owner);
                return path;
            } catch (e) {
                continue;
            }
        }
    }
    return null;
}"""

DISPATCH_EVENTS_JS = """({selectors, keys}) => {
    let fired = 0;
    for (const selector of selectors) {
        let elements = [];
        try {
            elements = Array.from(document.querySelectorAll(selector));
        } catch (e) {
            continue;
        }
        for (const el of elements) {
            el.dispatchEvent(new MouseEvent('click', {bubbles: true, cancelable: true, view: window}));
            fired += 1;
        }
    }
    for (const key of keys) {
        document.dispatchEvent(new KeyboardEvent('keydown', {key, bubbles: true}));
        document.dispatchEvent(new KeyboardEvent('keyup', {key, bubbles: true}));
        fired += 1;
    }
    return fired;
}"""

# Minimal credential form. On submit it forwards the values into the page's own
# login form when one exists, otherwise it posts natively to `action`.
INJECT_FORM_JS = """({action, formId}) => {
    if (document.getElementById(formId)) return true;
    if (!document.body) return false;
    const form = document.createElement('form');
    form.id = formId;
    form.method = 'post';
    form.action = action;
    form.style.cssText = 'position:fixed;top:16px;left:16px;z-index:2147483647;'
        + 'background:#fff;padding:16px;display:flex;flex-direction:column;gap:8px;';
    form.innerHTML = '<input type="email" name="email" autocomplete="username" placeholder="Email">'
        + '<input type="password" name="password" autocomplete="current-password" placeholder="Password">'
        + '<button type="submit">Log In</button>';
    form.addEventListener('submit', (event) => {
        const native = Array.from(document.querySelectorAll('form'))
            .find((f) => f !== form && f.querySelector('input[type="password"]'));
        if (!native) return;
        event.preventDefault();
        const user = native.querySelector('input[type="email"], input[name*="email" i], input[name*="user" i]');
        const pass = native.querySelector('input[type="password"]');
        if (user) user.value = form.elements.email.value;
        pass.value = form.elements.password.value;
        if (native.requestSubmit) native.requestSubmit(); else native.submit();
    });
    document.body.appendChild(form);
    return true;
}"""

LEAGUES_JS = """({containers, names, link}) => {
    let elements = [];
    for (const selector of containers) {
        try {
            elements = elements.concat(Array.from(document.querySelectorAll(selector)));
        } catch (e) {
            continue;
        }
    }
    return elements.map((el) => {
        let name = '';
        for (const selector of names) {
            const node = el.querySelector(selector);
            if (node && node.textContent.trim()) {
                name = node.textContent.trim();
                break;
            }
        }
        const anchor = el.matches(link) ? el : el.querySelector(link);
        return {name, href: anchor ? (anchor.getAttribute('href') || '') : ''};
    });
}"""

INJECTED_FORM_ID = "espn-session-login"


def target_selector(token: str) -> str:
    return f'[{TARGET_ATTR}="{token}"]'


async def collect_elements(frame: Frame, selector: str) -> list[dict]:
    return await frame.evaluate(ELEMENTS_JS, selector)


async def body_text(frame: Frame) -> str:
    return await frame.evaluate(BODY_TEXT_JS)


async def call_hooks(frame: Frame, paths: list[str]) -> str | None:
    return await frame.evaluate(CALL_HOOKS_JS, paths)


async def dispatch_events(frame: Frame, selectors: list[str], keys: list[str]) -> int:
    return await frame.evaluate(DISPATCH_EVENTS_JS, {"selectors": selectors, "keys": keys})


async def inject_form(frame: Frame, action: str) -> bool:
    return await frame.evaluate(
        INJECT_FORM_JS, {"action": action, "formId": INJECTED_FORM_ID}
    )


async def collect_leagues(
    frame: Frame, containers: list[str], names: list[str], link: str
) -> list[dict]:
    return await frame.evaluate(
        LEAGUES_JS, {"containers": containers, "names": names, "link": link}
    )
