from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .docker_ops import RUNTIME_ERRORS, DockerRuntime, RuntimeUnavailable
from .logging_config import init_logging
from .reconciler import Reconciler
from .settings import NETWORK_NAME, get_host_gateway_config_from_env, load_settings

log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="appsnet",
        description=f"Attach app containers to the internal '{NETWORK_NAME}' network and keep host gateway aliases in place.",
        epilog="Configured through the environment: ENABLE_HOST_GATEWAY_ALIAS, HOST_GATEWAY_ALIASES, APPSNET_LOG_LEVEL, "
        "APPSNET_EXEC_POLL_INTERVAL_S, APPSNET_EXEC_TIMEOUT_S, APPSNET_EVENTS_RECONNECT_DELAY_S.",
    )
    p.parse_args(argv)

    settings = load_settings()
    init_logging(settings.log_level)

    try:
        config = get_host_gateway_config_from_env()
    except ValueError as e:
        log.error(f"HOST_GATEWAY_ALIASES: {e}")
        return 1

    try:
        runtime = DockerRuntime.from_env()
        reconciler = Reconciler(runtime, config, settings=settings)
        asyncio.run(reconciler.run())
    except KeyboardInterrupt:
        return 0
    except RuntimeUnavailable as e:
        log.error(str(e))
        return 1
    except RUNTIME_ERRORS as e:
        log.error(f"Startup failed: {type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
