import asyncio
import os
import signal
import sys

from accessibility_tester.config import get_global_conf
from accessibility_tester.server import AccessibilityTesterServer
from accessibility_tester.utils.logger import logger

# The stdio transport reads stdin in a worker thread that cannot be cancelled,
# so it never stops on its own and is exited almost immediately. Network
# transports get time to finish in-flight requests.
STDIO_SHUTDOWN_GRACE_SECONDS = 0.5
SHUTDOWN_GRACE_SECONDS = 5.0


def _shutdown_grace(transport: str) -> float:
    return STDIO_SHUTDOWN_GRACE_SECONDS if transport == "stdio" else SHUTDOWN_GRACE_SECONDS


def _force_exit(transport: str) -> None:
    if transport == "stdio":
        logger.info("Closing stdio transport")
    else:
        logger.warning(f"Server did not stop within {SHUTDOWN_GRACE_SECONDS}s, exiting")
    os._exit(0)


async def a_main() -> None:
    config = get_global_conf()
    logger.info("MODE: %s", config.get_mode())
    server = AccessibilityTesterServer(config)
    transport = config.get_transport()

    loop = asyncio.get_running_loop()

    def on_signal() -> None:
        server.stop()
        loop.call_later(_shutdown_grace(transport), _force_exit, transport)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(on_signal))

    await server.start()


def main() -> None:
    asyncio.run(a_main())
    sys.exit(0)


if __name__ == "__main__":  # pragma: no cover
    main()
