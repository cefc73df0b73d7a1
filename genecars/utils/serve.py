import asyncio
from collections.abc import Awaitable, Callable
import signal


async def serve_until_signal(
    task: asyncio.Task, *, on_signal: Callable[[], Awaitable[None]]
) -> None:
    """
    Wait until *task* finishes or SIGINT/SIGTERM arrives.

    On a signal, await *on_signal* (e.g. ``runner.stop()``) so the current
    generation completes before the task exits.
    """
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    loop.add_signal_handler(signal.SIGINT, stop_event.set)
    loop.add_signal_handler(signal.SIGTERM, stop_event.set)
    try:
        waiter = asyncio.create_task(stop_event.wait())
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        if waiter in done:
            await on_signal()
        else:
            waiter.cancel()
        # surface any exception raised by the task
        await task
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        loop.remove_signal_handler(signal.SIGTERM)
