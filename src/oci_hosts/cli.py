from __future__ import annotations

import sys
from dataclasses import asdict
from typing import Optional, Tuple

from .auth.providers import AuthContext, AuthError, resolve_auth
from .config import RunConfig, load_run_config
from .hosts import render_host_records
from .logging import LogConfig, get_logger, setup_logging
from .oci.network import OCINetworkSource
from .sync import MARKER_LINE, write_managed_block
from .util.errors import AuthResolutionError, SyncError, as_exit_code
from .util.rich_progress import WalkProgress, render_run_summary_table
from .walker import HierarchyWalker, NetworkSource, WalkStats

LOG = get_logger(__name__)


def _resolve_auth(cfg: RunConfig) -> AuthContext:
    try:
        return resolve_auth(cfg.auth, cfg.profile, cfg.oci_config)
    except AuthError as e:
        raise AuthResolutionError(str(e)) from e


def _build_source(cfg: RunConfig) -> OCINetworkSource:
    ctx = _resolve_auth(cfg)
    try:
        return OCINetworkSource.from_auth(ctx)
    except AuthError as e:
        raise AuthResolutionError(str(e)) from e


def _progress_enabled(cfg: RunConfig) -> bool:
    if cfg.progress is not None:
        return cfg.progress
    return sys.stderr.isatty()


def build_hosts_block(
    source: NetworkSource,
    cfg: RunConfig,
    progress: Optional[WalkProgress] = None,
) -> Tuple[str, WalkStats]:
    """
    Walk the hierarchy under cfg.compartment and render the managed block
    content. Returns (content, stats).
    """
    walker = HierarchyWalker(
        source,
        domain_suffix=cfg.domain_suffix,
        on_progress=progress.advance if progress is not None else None,
    )
    content = render_host_records(walker.iter_host_records(cfg.compartment))
    return content, walker.stats


def cmd_run(cfg: RunConfig, source: Optional[NetworkSource] = None) -> int:
    if not cfg.print_only and not cfg.hosts.is_file():
        raise SyncError(f"Target file {cfg.hosts} does not exist; create it first (it may be empty)")
    if source is None:
        source = _build_source(cfg)

    show_progress = _progress_enabled(cfg)
    with WalkProgress(enabled=show_progress) as progress:
        content, stats = build_hosts_block(source, cfg, progress)

    if stats.branch_errors:
        LOG.warning("Discovery finished with %d branch errors; output may be incomplete", stats.branch_errors)

    if cfg.print_only:
        sys.stdout.write(MARKER_LINE)
        sys.stdout.write(content)
        target = "<stdout>"
    else:
        write_managed_block(cfg.hosts, content)
        target = str(cfg.hosts)
    LOG.info("Wrote %d lines to %s", stats.records, target)

    render_run_summary_table(
        enabled=show_progress,
        status="OK" if not stats.branch_errors else "PARTIAL",
        stats=asdict(stats),
        target=target,
    )
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    try:
        cfg = load_run_config(argv=argv)
        setup_logging(LogConfig(level=cfg.log_level, json_logs=cfg.json_logs))
        sys.exit(cmd_run(cfg))
    except SystemExit:
        raise
    except BrokenPipeError:
        # Common when piping --print output to `head` or similar tools.
        sys.exit(0)
    except Exception as e:
        setup_logging(LogConfig())  # no-op when already configured
        LOG.error("Execution failed", extra={"error": str(e)})
        sys.exit(as_exit_code(e))


if __name__ == "__main__":
    main()
