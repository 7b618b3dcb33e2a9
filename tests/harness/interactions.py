"""Pilot wrappers with settling for Textual in-process tests.

Thin wrappers that wait for the app to settle after each interaction,
waiting for CPU idle instead of fixed sleeps.
"""

from textual.pilot import Pilot


async def settle(pilot: Pilot, rounds: int = 3) -> None:
    """Let snapshot messages and the frames they request run.

    One state change takes several hops (snapshot message, then frame
    callback), so a single pause is not always enough.
    """
    for _ in range(rounds):
        await pilot.pause()


async def press_and_settle(pilot: Pilot, *keys: str) -> None:
    """Press keys and wait for app to settle."""
    await pilot.press(*keys)
    await settle(pilot)


async def click_and_settle(
    pilot: Pilot, selector=None, offset: tuple[int, int] = (0, 0)
) -> None:
    """Click and wait for app to settle."""
    await pilot.click(selector, offset=offset)
    await settle(pilot)


async def resize_and_settle(pilot: Pilot, width: int, height: int) -> None:
    """Resize terminal and wait for app to settle."""
    await pilot.resize_terminal(width, height)
    await settle(pilot)
