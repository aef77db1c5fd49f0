# === FILE: page_scout/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for the PageScout crawler.

Commands:
  crawl     Discover listing URLs and save the pages as page-NNN.html
  config    Show the effective configuration

Common options:
  --config PATH       YAML/JSON config file (environment variables still apply)
  --limit INT         Page budget (overrides max_pages / MAX_PAGES)
  --output-dir PATH   Output directory (overrides output_dir / OUTPUT_DIR)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file in addition to stdout
  --log-format FORMAT Logging format string

crawl options:
  --summary-json PATH Save the run summary as JSON
  --crawl-timeout SEC Abort the whole crawl after SEC seconds

Exit status is 0 when the crawl completes, 1 when it is aborted (invalid
configuration, no URLs discovered) or fails unexpectedly.

Example:
  page-scout --limit 50 --output-dir ./pages crawl --summary-json summary.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from page_scout import __version__
from page_scout.config import load_config
from page_scout.engine import start_crawl
from page_scout.errors import ConfigurationError
from page_scout.logger import DEFAULT_FORMAT, init_logging
from page_scout.report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="PageScout, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML or JSON configuration file.",
)
@click.option(
    "--limit", "-l", "limit",
    type=int,
    default=None,
    help="Maximum number of pages to crawl (overrides max_pages).",
)
@click.option(
    "--output-dir", "-o", "output_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the saved pages (overrides output_dir).",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level.",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Log file (stdout only if omitted).",
)
@click.option(
    "--log-format", "log_format",
    default=DEFAULT_FORMAT,
    show_default=True,
    help="Format string for log records.",
)
@click.pass_context
def cli(ctx, config_path, limit, output_dir, log_level, log_file, log_format):
    """PageScout command group."""
    init_logging(level=log_level, log_file=log_file, log_format=log_format)
    try:
        cfg = load_config(config_path, overrides={"max_pages": limit, "output_dir": output_dir})
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--summary-json", "-j", "summary_json",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Save the run summary as JSON.",
)
@click.option(
    "--crawl-timeout", "crawl_timeout",
    type=float,
    default=None,
    help="Timeout for the whole crawl (seconds).",
)
@click.pass_context
def crawl(ctx, summary_json, crawl_timeout):
    """Discover listing URLs and save every page."""
    cfg = ctx.obj["config"]
    click.echo(f"Starting crawl of {cfg.site_root}")
    try:
        if crawl_timeout:
            summary = asyncio.run(asyncio.wait_for(start_crawl(cfg), timeout=crawl_timeout))
        else:
            summary = asyncio.run(start_crawl(cfg))
    except asyncio.TimeoutError:
        print_error(f"Crawl did not finish within {crawl_timeout} seconds")
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
    except Exception as e:
        print_error(f"Crawl failed: {e}")

    if summary_json:
        try:
            saved = render_json(summary, summary_json)
            click.echo(f"Summary: {saved}")
        except OSError as e:
            print_error(f"Could not save summary: {e}")

    if not summary.ok:
        print_error(f"Crawl aborted: {summary.reason}")

    click.echo(f"Total pages crawled: {summary.crawled}/{summary.budget}")
    click.echo(f"Output directory: {summary.output_dir}")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj["config"]
    data = cfg.model_dump(mode="json")
    data["base_url"] = cfg.site_root
    data["proxy_url"] = cfg.masked_proxy
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def main():
    cli(prog_name="page-scout")


if __name__ == "__main__":
    main()
