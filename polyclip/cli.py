#!/usr/bin/env python

"""
Entry point for running polygon set operations over GeoJSON
"""
import logging
import os
import sys
from typing import Callable, Optional, Sequence

import click
import dotenv
import shapely.errors

from .stages import common, operate
from .utils import log

# Failures that abort a run with a clean error message. Malformed GeoJSON,
# invalid JSON and empty bounding boxes all raise ValueError subclasses.
RUN_ERRORS = (ValueError, TypeError, OSError, shapely.errors.ShapelyError)


def _env_flag(name: str) -> Callable[[], bool]:
    return lambda: os.environ.get(name, "false").lower() == "true"


def _stdin_is_piped() -> bool:
    """Returns true unless stdin is an interactive terminal"""
    return not sys.stdin.isatty()


# --- Common Click options --- #


def _paths_argument() -> Callable:
    return click.argument("positionals", nargs=-1, type=click.Path())


def _output_option() -> Callable:
    return click.option(
        "-o",
        "--output",
        "output",
        type=click.Path(dir_okay=False),
        help="File to write resulting GeoJSON out to",
    )


def _id_option() -> Callable:
    return click.option(
        "-i",
        "--id",
        "feature_id",
        type=str,
        callback=lambda ctx, param, value: operate.parse_feature_id(value),
        help="GeoJSON Feature id to add to output GeoJSON",
    )


def _points_option() -> Callable:
    return click.option(
        "-p",
        "--points",
        "max_points",
        type=click.IntRange(min=0),
        default=lambda: os.environ.get("POLYCLIP_POINTS", common.DEFAULT_POINTS),
        show_default=str(common.DEFAULT_POINTS),
        help="Goal number of points to process at a time, 0 for all at once",
    )


def _quiet_option() -> Callable:
    return click.option(
        "-q",
        "--quiet/--no-quiet",
        "quiet",
        type=bool,
        default=_env_flag("POLYCLIP_QUIET"),
        help="Suppress warnings and progress logging",
    )


def _subject_option() -> Callable:
    return click.option(
        "-s",
        "--subject",
        "subject",
        type=click.Path(dir_okay=False),
        help="GeoJSON file containing subject",
    )


def _bboxes_option() -> Callable:
    return click.option(
        "-b",
        "--bboxes/--no-bboxes",
        "bboxes",
        type=bool,
        default=_env_flag("POLYCLIP_BBOXES"),
        help="Respect any pre-computed bounding boxes found",
    )


def _common_options(func: Callable) -> Callable:
    for option in (
        _paths_argument(),
        _output_option(),
        _id_option(),
        _points_option(),
        _quiet_option(),
    ):
        func = option(func)
    return func


def _run(
    operation: common.Operation,
    positionals: Sequence[str],
    output: Optional[str],
    feature_id: Optional[operate.FeatureId],
    max_points: int,
    quiet: bool,
    subject: Optional[str] = None,
    bboxes: bool = False,
) -> None:
    stdin_piped = _stdin_is_piped()

    # Without anything piped in via stdin, nor any GeoJSON specified as
    # positionals, there is nothing to operate on
    if not stdin_piped and not positionals:
        raise click.UsageError("Please provide some GeoJSON via stdin or positionals")

    if operation == common.Operation.DIFFERENCE and not stdin_piped and not subject:
        raise click.UsageError(
            "difference requires either input on stdin or -s / --subject to be set"
        )

    if quiet:
        log.set_level(logging.ERROR)

    try:
        operate.run_operation(
            operation,
            positionals,
            subject=subject,
            stdin=sys.stdin.buffer if stdin_piped else None,
            bboxes=bboxes,
            feature_id=feature_id,
            output=output,
            stdout=sys.stdout.buffer,
            max_points=max_points,
            warn=(lambda message: None) if quiet else None,
        )
    except RUN_ERRORS as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(package_name="polyclip-cli")
def cli():
    """Run polygon set operations over GeoJSON"""
    dotenv.load_dotenv()


@cli.command()
@_common_options
def union(**kwargs) -> None:
    """Compute the union"""
    _run(common.Operation.UNION, **kwargs)


@cli.command()
@_common_options
def intersection(**kwargs) -> None:
    """Compute the intersection"""
    _run(common.Operation.INTERSECTION, **kwargs)


@cli.command()
@_common_options
@_subject_option()
@_bboxes_option()
def difference(**kwargs) -> None:
    """Compute the difference"""
    _run(common.Operation.DIFFERENCE, **kwargs)


@cli.command()
@_common_options
def xor(**kwargs) -> None:
    """Compute the xor"""
    _run(common.Operation.XOR, **kwargs)


if __name__ == "__main__":
    cli()
