from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from playwright.sync_api import Page

from .models import ExtractionBatch, ViewType
from .parser import extract_events

ARTIFACTS_DIR = Path("artifacts")


def _stamp() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def capture_planner(page: Page, artifacts_dir: Path = ARTIFACTS_DIR) -> str:
    page.wait_for_timeout(500)
    html = page.content()

    pages_dir = artifacts_dir / "pages"
    pages_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = pages_dir / f"planner_{_stamp()}.html"
    artifact_path.write_text(html, encoding="utf-8")
    logging.info("Saved planner snapshot to %s", artifact_path)
    return html


def save_screenshot(page: Page, artifacts_dir: Path = ARTIFACTS_DIR) -> None:
    screenshots_dir = artifacts_dir / "screenshots"
    screenshots_dir.mkdir(parents=True, exist_ok=True)
    screenshot_path = screenshots_dir / f"planner_{_stamp()}.png"
    try:
        page.screenshot(path=str(screenshot_path), full_page=True)
        logging.info("Saved screenshot to %s", screenshot_path)
    except Exception as shot_exc:
        logging.warning("Unable to capture screenshot: %s", shot_exc)


def fetch_planner_events(page: Page, tz: ZoneInfo, artifacts_dir: Path = ARTIFACTS_DIR) -> ExtractionBatch:
    html = capture_planner(page, artifacts_dir)
    batch = extract_events(html, tz)
    if batch.context.view_type is ViewType.UNKNOWN:
        logging.error("Page at %s is not a recognized planner view", page.url)
        save_screenshot(page, artifacts_dir)
    return batch
