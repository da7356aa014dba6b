import asyncio
import random

from playwright.async_api import Locator


class HumanBehavior:
    """Human-paced typing and clicking; `enabled=False` drops every delay."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    async def random_delay(self, min_ms: int = 500, max_ms: int = 2000) -> None:
        if not self.enabled:
            return
        delay = random.uniform(min_ms, max_ms) / 1000.0
        await asyncio.sleep(delay)

    async def type_like_human(self, element: Locator, text: str) -> None:
        await element.click()
        # Clear any existing value
        await element.fill("")
        if not self.enabled:
            await element.fill(text)
            return

        await self.random_delay(300, 800)
        for char in text:
            # press() would read "+" as a key-combination separator
            await element.press_sequentially(char)
            delay = random.uniform(50, 180) / 1000.0
            if random.random() < 0.05:
                delay += random.uniform(200, 500) / 1000.0
            await asyncio.sleep(delay)

    async def click_with_delay(self, element: Locator) -> None:
        await self.random_delay(200, 600)
        box = await element.bounding_box() if self.enabled else None
        if box:
            offset_x = random.uniform(box["width"] * 0.25, box["width"] * 0.75)
            offset_y = random.uniform(box["height"] * 0.25, box["height"] * 0.75)
            await element.click(position={"x": offset_x, "y": offset_y})
        else:
            await element.click()
