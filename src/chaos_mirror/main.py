from __future__ import annotations

import sys
from typing import List, Optional

from chaos_mirror import __version__
from chaos_mirror.config_models import MirrorConfig, load_and_validate_config
from chaos_mirror.core.errors import ProgramIndexError
from chaos_mirror.core.factory import ComponentFactory
from chaos_mirror.core.models import RunCounters
from chaos_mirror.utils.logging import get_logger, setup_logging
from chaos_mirror.utils.time import utc_now

DEFAULT_CONFIG = "configs/mirror.yaml"

log = get_logger("chaos_mirror.main")


def run_once(config: MirrorConfig) -> RunCounters:
    """
    Run one synchronization of every program in the index.

    Raises:
        ProgramIndexError: If the program index cannot be fetched or decoded.
    """
    built = ComponentFactory(config).build()
    started = utc_now()

    try:
        programs = built.index_fetcher.fetch()
        since = built.last_run.load() if config.skip_unchanged else None
        if since is None:
            log.info("No previous run recorded; synchronizing all %d programs", len(programs))
        else:
            log.info("Synchronizing programs updated after %s", since.isoformat())

        counters = built.engine.run(programs, since=since)
    finally:
        built.client.close()

    if counters.programs_failed:
        # Failed programs must be retried next run even if upstream does not change again.
        log.warning(
            "Last-run marker not advanced: %d programs failed (%s)",
            counters.programs_failed,
            ", ".join(counters.failures),
        )
    else:
        built.last_run.save(started)

    return counters


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the mirror."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 1:
        print("Usage: chaos-mirror [configs/mirror.yaml]")
        raise SystemExit(2)

    config_path = args[0] if args else DEFAULT_CONFIG
    try:
        config = load_and_validate_config(config_path, required=bool(args))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        raise SystemExit(2)

    setup_logging(config.logging_config)
    log.info("ChaosMirror version %s (config=%s)", __version__, config_path)

    try:
        counters = run_once(config)
    except ProgramIndexError as e:
        log.error("Aborting run: %s", e)
        raise SystemExit(1)

    for line in counters.summary_lines():
        print(line)


if __name__ == "__main__":
    main()
