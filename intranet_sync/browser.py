from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from .config import Settings
from .layout import CALENDAR_SELECTOR
from .schedule import save_screenshot


def create_context(settings: Settings, headful: bool = False) -> Tuple[Playwright, Browser, BrowserContext]:
    playwright = sync_playwright().start()
    browser = playwright.chromium.launch(headless=not headful)
    storage_state = Path(settings.storage_state_path)
    context = browser.new_context(storage_state=str(storage_state) if storage_state.exists() else None)
    return playwright, browser, context


def open_planner(
    settings: Settings,
    url: str,
    headful: bool = False,
    wait_ms: int = 120_000,
) -> tuple[Playwright, Browser, BrowserContext, Page]:
    """Open the planner page, reusing the stored browser session.

    In headful mode the window stays open until the planner shows up, so an
    expired session can be renewed by hand.
    """
    if not url:
        raise RuntimeError("No planner URL configured (INTRANET_PLANNER_URL or --url)")

    playwright, browser, context = create_context(settings, headful=headful)
    page = context.new_page()
    try:
        page.goto(url, wait_until="networkidle")
        timeout = wait_ms if headful else 10_000
        if headful:
            logging.info("Waiting up to %ds for the planner to render...", timeout // 1000)
        page.wait_for_selector(CALENDAR_SELECTOR, timeout=timeout)
    except Exception:
        logging.error("Planner did not render at %s; the stored session may have expired", page.url)
        save_screenshot(page)
        close(playwright, browser, context, settings)
        raise

    logging.info("Planner loaded, session stored at %s", settings.storage_state_path)
    context.storage_state(path=settings.storage_state_path)
    return playwright, browser, context, page


def close(playwright: Playwright, browser: Browser, context: BrowserContext, settings: Settings) -> None:
    context.storage_state(path=settings.storage_state_path)
    context.close()
    browser.close()
    playwright.stop()
