# browse.py
# Opens a real browser window with the "Copy prompt + transcript" button
# on every YouTube watch page you visit.
import argparse
import asyncio
import logging
from dotenv import load_dotenv

load_dotenv()

from playwright.async_api import Error as PlaywrightError, async_playwright
from ytprompt.config import BROWSER_CHANNEL, START_URL, USER_AGENT
from ytprompt.session import attach_session
from ytprompt.ui import PROMPT_MODES


async def browse(start_url: str, mode: str = "prompt"):
    async with async_playwright() as p:
        launch_kwargs = {"headless": False}
        if BROWSER_CHANNEL:
            launch_kwargs["channel"] = BROWSER_CHANNEL
        browser = await p.chromium.launch(**launch_kwargs)
        context = await browser.new_context(
            viewport=None,
            user_agent=USER_AGENT,
        )
        await context.grant_permissions(
            ["clipboard-read", "clipboard-write"],
            origin="https://www.youtube.com",
        )
        page = await context.new_page()

        await attach_session(page, mode=mode)
        print(f"🎬 Opening {start_url} (close the window to quit)")
        logging.info(f"[Browse] Session attached, opening {start_url}")

        try:
            await page.goto(start_url, wait_until="domcontentloaded")
            await page.wait_for_event("close", timeout=0)
        except PlaywrightError as e:
            logging.info(f"[Browse] Browser went away: {e}")
        finally:
            await browser.close()


def main():
    parser = argparse.ArgumentParser(description="Browse YouTube with a copy-prompt button.")
    parser.add_argument("url", nargs="?", default=START_URL, help="Page to open first")
    parser.add_argument("--mode", choices=PROMPT_MODES, default="prompt",
                        help="prompt: summary instructions + transcript, transcript: transcript only")
    args = parser.parse_args()
    asyncio.run(browse(args.url, mode=args.mode))


if __name__ == "__main__":
    main()
