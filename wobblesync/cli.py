#!/usr/bin/env python3

# Imports {{{
# builtins
import logging
import pathlib
import sys
from functools import partial
from textwrap import dedent

# 3rd party
import click
import requests

# local modules
from wobblesync.config import load_config, write_template
from wobblesync.constants import DEFAULT_CONFIG_PATH
from wobblesync.exceptions import AuthError, ConfigError
from wobblesync.remote import fetch_channel
from wobblesync.sync import run as run_sync
from wobblesync.utils import Reporter, list_items
from wobblesync.wobble import WobbleClient

# }}}


# setup logging
log = logging.getLogger("wobblesync")
log.setLevel(logging.INFO)
sh = logging.StreamHandler(sys.stdout)
sh.setLevel(logging.DEBUG)
log.addHandler(sh)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--debug", is_flag=True, help="Show debug logging messages")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=pathlib.Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="The configuration file.",
)
@click.pass_context
def cli(ctx, debug, config_path):
    if debug:
        log.setLevel(logging.DEBUG)
        formatter = logging.Formatter("%(levelname)s: %(message)s")
        sh.setFormatter(formatter)
    ctx.obj = config_path


def get_config(path: pathlib.Path):
    try:
        return load_config(path)
    except ConfigError as e:
        log.error(f"Failed to read {path}: {e}")
        sys.exit(1)


@cli.command()
@click.option(
    "-n", "--dry-run", is_flag=True, help="Only show what would be changed."
)
@click.pass_obj
def run(config_path, dry_run):
    """
    Sync all configured feeds once.
    """
    config = get_config(config_path)
    timeout = config.settings["timeout"]

    preamble = dedent(
        f"""
    ========== wobblesync ==========
     * Endpoint: {config.wobble.endpoint}
     * Feeds configured: {len(config.feeds)}
     * Pacing delay: {config.settings["pacing_delay"]} seconds
    ================================
    """
    )
    log.info(preamble)

    with requests.Session() as session:
        client = WobbleClient(config.wobble.endpoint, session, timeout)
        fetch = partial(fetch_channel, session=session, timeout=timeout)
        try:
            reports = run_sync(config, client, fetch=fetch, dry_run=dry_run)
        except AuthError as e:
            log.error(f"Failed to authenticate with service: {e}")
            sys.exit(1)

    failures = sum(len(report.failed) for report in reports)
    skipped = len(config.feeds) - len(reports)
    log.info(
        f"Finished: {len(reports)} feeds synced, {skipped} skipped, "
        f"{failures} operations failed."
    )


@cli.group(name="list")
def show():
    ...


@show.command(name="feeds")
@click.pass_obj
def list_feeds(config_path):
    config = get_config(config_path)
    list_items(
        items=config.feeds,
        not_found_msg="No feeds found.",
        found_msg="Currently syncing:",
        line_fmt="  {name} ({url}, max items: {max_items})",
    )


@cli.command()
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing file.")
@click.pass_obj
def init(config_path, force):
    """
    Write a template configuration file.
    """
    with Reporter(
        f"Wrote a template configuration to {config_path}!",
        "Failed to write configuration: {exception}",
    ) as reporter:
        write_template(config_path, force)

    if reporter.failed:
        sys.exit(1)
