"""Typed configuration model with validation."""

import os

import yaml
from pydantic import BaseModel, Field


class SiteConfig(BaseModel):
    login_url: str = "https://www.espn.com/login"
    app_url: str = "https://fantasy.espn.com/"
    target_domain: str = "espn.com"
    login_domains: list[str] = Field(
        default_factory=lambda: ["registerdisney.go.com", "cdn.registerdisney.go.com"]
    )
    cookie_names: list[str] = Field(default_factory=lambda: ["espn_s2", "SWID"])
    email: str = ""
    password: str = ""


class BrowserConfig(BaseModel):
    headless: bool = True
    executable_path: str = ""
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
    viewport_width: int = 1280
    viewport_height: int = 720
    locale: str = "en-US"
    timezone: str = "America/New_York"
    proxy: str = ""
    stealth: bool = True
    human_delays: bool = True
    # Must stay below timeouts.automated, which also covers the wait for the slot
    acquire_timeout: float = 120.0
    navigation_timeout: float = 30.0
    extra_args: list[str] = Field(default_factory=list)


class LocatorConfig(BaseModel):
    email_terms: list[str] = Field(default_factory=lambda: ["email", "username", "login"])
    password_terms: list[str] = Field(default_factory=lambda: ["password"])
    deny_terms: list[str] = Field(default_factory=lambda: ["search", "sports", "team"])
    max_frames: int = 10
    retry_attempts: int = 3
    retry_interval: float = 3.0


class RevealConfig(BaseModel):
    strategies: list[str] = Field(
        default_factory=lambda: ["hooks", "events", "text", "selectors", "inject"]
    )
    settle_delay: float = 3.0
    global_hooks: list[str] = Field(
        default_factory=lambda: [
            "DISNEY.Login.launchLogin",
            "OneID.launchLogin",
            "espn.memberservices.login",
        ]
    )
    event_selectors: list[str] = Field(
        default_factory=lambda: [
            '[data-toggle="modal"][data-target*="login" i]',
            '[aria-controls*="login" i]',
            '[data-behavior*="login" i]',
        ]
    )
    event_keys: list[str] = Field(default_factory=list)
    login_phrases: list[str] = Field(default_factory=lambda: ["log in", "login", "sign in"])
    trigger_deny_terms: list[str] = Field(
        default_factory=lambda: ["log out", "logout", "sign out", "sign up"]
    )
    trigger_selectors: list[str] = Field(
        default_factory=lambda: [
            'a[href*="login"]',
            ".login-link",
            "#login-button",
            '[data-testid*="login"]',
            '[data-module="LoginModal"]',
            "#did-ui-view button",
        ]
    )


class SubmitConfig(BaseModel):
    continue_phrases: list[str] = Field(default_factory=lambda: ["continue", "next"])
    submit_phrases: list[str] = Field(
        default_factory=lambda: ["log in", "sign in", "login", "submit", "continue"]
    )
    button_deny_terms: list[str] = Field(
        default_factory=lambda: ["search", "cancel", "forgot", "sign up", "create account"]
    )
    error_phrases: list[str] = Field(
        default_factory=lambda: [
            "incorrect",
            "invalid",
            "doesn't match",
            "does not match",
            "account locked",
        ]
    )
    timeout: float = 30.0
    poll_interval: float = 0.5


class ExtractConfig(BaseModel):
    settle_delay: float = 3.0
    cookie_reads: int = 3
    read_interval: float = 1.0


class DebugConfig(BaseModel):
    poll_interval: float = 2.0
    max_wait: float = 300.0
    progress_interval: float = 15.0


class DiscoveryConfig(BaseModel):
    container_selectors: list[str] = Field(
        default_factory=lambda: ['[data-testid*="league"]', ".league-item", ".fantasy-league"]
    )
    name_selectors: list[str] = Field(
        default_factory=lambda: [".league-name", ".team-name", "h3", "h4"]
    )
    link_selector: str = 'a[href*="leagueId"]'
    default_season: int = 2025
    placeholder_id: str = "1713644125"
    placeholder_name: str = "My ESPN Fantasy League"
    placeholder_sport: str = "ffl"


class TimeoutConfig(BaseModel):
    automated: float = 180.0
    debug_grace: float = 60.0


class AppConfig(BaseModel):
    site: SiteConfig = Field(default_factory=SiteConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    locator: LocatorConfig = Field(default_factory=LocatorConfig)
    reveal: RevealConfig = Field(default_factory=RevealConfig)
    submit: SubmitConfig = Field(default_factory=SubmitConfig)
    extract: ExtractConfig = Field(default_factory=ExtractConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)


ENV_OVERRIDES = {
    "ESPN_EMAIL": ("site", "email"),
    "ESPN_PASSWORD": ("site", "password"),
    "CHROMIUM_PATH": ("browser", "executable_path"),
    "ESPN_PROXY": ("browser", "proxy"),
    "ESPN_HEADLESS": ("browser", "headless"),
}


def load_config(path: str | None = "config/settings.yaml") -> AppConfig:
    """Load config from an optional YAML file with environment variable overrides.

    A missing file is not an error: every setting has a default.
    """
    raw = {}
    if path and os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    config = AppConfig(**raw)

    for env_var, (section, field) in ENV_OVERRIDES.items():
        val = os.environ.get(env_var)
        if val:
            sub = getattr(config, section)
            if isinstance(getattr(sub, field), bool):
                val = val.strip().lower() in ("1", "true", "yes", "on")
            setattr(sub, field, val)

    return config
