"""Ordered candidate strategies shared by form, trigger and button search.

A strategy inspects one frame and returns the first element its predicate
accepts, tagged with the strategy's name, or None. Predicates work on the
attribute snapshots produced by dom.collect_elements and are plain functions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from playwright.async_api import Frame, Locator

from . import dom

logger = logging.getLogger(__name__)

Attrs = dict[str, Any]
Predicate = Callable[[Attrs], bool]

# Input types that can hold an email/username. An absent type renders as text.
TEXT_INPUT_TYPES = frozenset({"", "text", "email", "tel"})
PASSWORD_INPUT_TYPES = TEXT_INPUT_TYPES | {"password"}

DENY_KEYS = ("name", "id", "className", "placeholder", "ariaLabel", "text", "value")
# A typed value must never disqualify the field it was typed into.
INPUT_DENY_KEYS = ("name", "id", "className", "placeholder", "ariaLabel")

INPUT_SELECTOR = "input"
BUTTON_SELECTOR = 'button, input[type="submit"], input[type="button"], [role="button"]'
SUBMIT_SELECTOR = 'button[type="submit"], input[type="submit"]'
TRIGGER_SELECTOR = 'a, button, [role="button"]'


@dataclass(frozen=True)
class Candidate:
    kind: str
    frame: Frame
    selector: str
    index: int
    heuristic: str
    token: str
    attrs: Attrs = field(default_factory=dict, compare=False)

    @property
    def handle(self) -> Locator:
        # By stamp, not position: locator(selector).nth() also counts shadow DOM
        return self.frame.locator(dom.target_selector(self.token))


@dataclass(frozen=True)
class Strategy:
    name: str
    selector: str
    predicate: Predicate
    deny_terms: tuple[str, ...] = ()
    deny_keys: tuple[str, ...] = DENY_KEYS
    visible_only: bool = True

    async def find(self, frame: Frame, kind: str) -> Candidate | None:
        for attrs in await dom.collect_elements(frame, self.selector):
            if self.visible_only and not attrs.get("visible"):
                continue
            if is_denied(attrs, self.deny_terms, self.deny_keys):
                continue
            if self.predicate(attrs):
                return Candidate(
                    kind=kind,
                    frame=frame,
                    selector=self.selector,
                    index=attrs["index"],
                    heuristic=self.name,
                    token=attrs["token"],
                    attrs=attrs,
                )
        return None


async def first_match(
    strategies: list[Strategy], frame: Frame, kind: str
) -> Candidate | None:
    """Run strategies in order against one frame; the first hit wins."""
    for strategy in strategies:
        candidate = await strategy.find(frame, kind)
        if candidate:
            logger.debug(
                "%s candidate via %s: %s",
                kind,
                strategy.name,
                {k: candidate.attrs.get(k) for k in ("type", "name", "id", "placeholder")},
            )
            return candidate
    return None


# ------------------------------------------------------------------
# Predicates
# ------------------------------------------------------------------

def _lower(attrs: Attrs, key: str) -> str:
    return str(attrs.get(key) or "").lower()


def is_denied(attrs: Attrs, deny_terms, keys=DENY_KEYS) -> bool:
    return any(term.lower() in _lower(attrs, key) for key in keys for term in deny_terms)


def has_type(input_type: str) -> Predicate:
    def predicate(attrs: Attrs) -> bool:
        return _lower(attrs, "type") == input_type

    return predicate


def attribute_contains(key: str, terms, types=None) -> Predicate:
    def predicate(attrs: Attrs) -> bool:
        if types is not None and _lower(attrs, "type") not in types:
            return False
        value = _lower(attrs, key)
        return any(term.lower() in value for term in terms)

    return predicate


def text_contains(phrases) -> Predicate:
    """Visible text, value or aria-label contains one of the phrases."""

    def predicate(attrs: Attrs) -> bool:
        haystack = " ".join(
            _lower(attrs, key) for key in ("text", "value", "ariaLabel")
        )
        return any(phrase.lower() in haystack for phrase in phrases)

    return predicate


def always(attrs: Attrs) -> bool:
    return True


# ------------------------------------------------------------------
# Chains
# ------------------------------------------------------------------

ATTRIBUTE_ORDER = ("name", "id", "className", "placeholder", "autocomplete")


def input_chain(kind: str, terms, deny_terms) -> list[Strategy]:
    """Exact input type first, then allow-list terms attribute by attribute."""
    deny = tuple(deny_terms)
    types = PASSWORD_INPUT_TYPES if kind == "password" else TEXT_INPUT_TYPES
    chain = [
        Strategy(f"type={kind}", INPUT_SELECTOR, has_type(kind), deny, INPUT_DENY_KEYS)
    ]
    for key in ATTRIBUTE_ORDER:
        chain.append(
            Strategy(
                f"{key}~{kind}",
                INPUT_SELECTOR,
                attribute_contains(key, terms, types),
                deny,
                INPUT_DENY_KEYS,
            )
        )
    return chain


def button_chain(phrases, deny_terms, submit_first: bool) -> list[Strategy]:
    deny = tuple(deny_terms)
    by_type = Strategy("type=submit", SUBMIT_SELECTOR, always, deny)
    by_text = Strategy("text", BUTTON_SELECTOR, text_contains(phrases), deny)
    return [by_type, by_text] if submit_first else [by_text, by_type]


def text_trigger_chain(phrases, deny_terms) -> list[Strategy]:
    return [Strategy("text", TRIGGER_SELECTOR, text_contains(phrases), tuple(deny_terms))]


def selector_trigger_chain(selectors, deny_terms) -> list[Strategy]:
    deny = tuple(deny_terms)
    return [Strategy(f"selector:{sel}", sel, always, deny) for sel in selectors]
