# === FILE: site_crawler/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for SiteCrawler.

Commands:
  crawl SEED  Crawl every reachable page on SEED's host
  config      Show the effective configuration

Common options:
  --config PATH       Path to a YAML/JSON config (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Also write logs to this file
  --log-format FORMAT Logging format string

crawl options:
  --workers INT       Override the number of workers
  --capacity INT      Override the frontier capacity
  --timeout SEC       Override the per-request timeout
  --policy NAME       Full-frontier policy: revert or block
  --quiet             Do not print discovered URLs

Example:
  site-crawler crawl https://example.com/ --workers 20 --capacity 1000
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_crawler import __version__
from site_crawler.config import load_config
from site_crawler.crawler.frontier import FullFrontierPolicy
from site_crawler.engine import start_crawl
from site_crawler.errors import InvalidSeedURL
from site_crawler.logger import DEFAULT_FORMAT, configure

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])

#: exit status of a crawl stopped by SIGINT/SIGTERM
EXIT_CANCELLED = 130


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteCrawler, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (console only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteCrawler command group."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('seed')
@click.option('--workers', '-w', type=click.IntRange(min=1), default=None, help='Number of workers')
@click.option('--capacity', type=click.IntRange(min=1), default=None, help='Frontier capacity')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Per-request timeout (seconds)')
@click.option(
    '--policy',
    type=click.Choice([p.value for p in FullFrontierPolicy]),
    default=None,
    help='What to do when the frontier is full'
)
@click.option('--quiet', '-q', is_flag=True, help='Do not print discovered URLs')
@click.pass_context
def crawl(ctx, seed, workers, capacity, timeout, policy, quiet):
    """Crawl every page reachable from SEED on the same host."""
    cfg = ctx.obj['config']
    overrides = {
        'workers': workers,
        'frontier_capacity': capacity,
        'timeout': timeout,
        'full_frontier_policy': policy,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        try:
            cfg = cfg.model_validate({**cfg.model_dump(), **overrides})
        except ValidationError as e:
            print_error(f'Invalid option: {e}')

    on_discover = None if quiet else click.echo
    try:
        result = asyncio.run(start_crawl(seed, cfg, on_discover=on_discover))
    except InvalidSeedURL as e:
        print_error(str(e))

    click.echo(f'Total processed URLs: {result.processed}')
    if result.cancelled:
        ctx.exit(EXIT_CANCELLED)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(mode='json'), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
