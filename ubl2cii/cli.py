# File: ubl2cii/cli.py
import glob
import logging
import os
from pathlib import Path

import click

from ubl2cii.analyze import analyze_taxes
from ubl2cii.constants import DEFAULT_OUTPUT_SUFFIX, DEFAULT_TARGET_DIR
from ubl2cii.errors import ErrorList
from ubl2cii.helper import convert_auto_detect, write_cii

log = logging.getLogger(__name__)

_WILDCARD_CHARS = set("*?[]")


@click.group()
@click.version_option(package_name="ubl2cii")
def main():
    """ubl2cii – convert UBL 2.1 invoices and credit notes to CII D16B."""
    logging.basicConfig(level=logging.INFO)


def _expand_sources(sources, wildcard_expansion: bool) -> list[Path]:
    """Resolve CLI arguments to a list of readable files.

    Glob patterns are expanded recursively (``**`` included), directories
    contribute their readable files.  Missing inputs are logged and skipped.
    """
    candidates: list[str] = []
    for source in sources:
        if wildcard_expansion and _WILDCARD_CHARS & set(source):
            matches = sorted(glob.glob(source, recursive=True))
            if not matches:
                log.warning("No files match pattern %s", source)
            candidates.extend(matches)
        else:
            candidates.append(source)

    files: list[Path] = []
    for candidate in candidates:
        path = Path(candidate)
        if path.is_dir():
            files.extend(
                p for p in sorted(path.iterdir()) if p.is_file() and os.access(p, os.R_OK)
            )
        elif path.is_file() and os.access(path, os.R_OK):
            files.append(path)
        else:
            log.warning("Ignoring non-existing file %s", candidate)
    return files


def _log_errors(errors: ErrorList, path: Path) -> None:
    for entry in errors:
        log.log(entry.level.log_level, "%s: %s", path.name, entry)


def _convert_file(path: Path, target_dir: Path, suffix: str) -> bool:
    errors = ErrorList()
    invoice = convert_auto_detect(path, errors)
    if invoice is None:
        _log_errors(errors, path)
        click.echo(f"[ERROR] {path.name}: conversion failed")
        return False

    out_path = target_dir / f"{path.stem}{suffix}.xml"
    if not write_cii(invoice, out_path, errors):
        _log_errors(errors, path)
        click.echo(f"[ERROR] {path.name}: could not write {out_path}")
        return False

    _log_errors(errors, path)
    click.echo(f"[OK]    {path.name} -> {out_path}")
    return True


@main.command()
@click.argument("sources", nargs=-1)
@click.option(
    "-t",
    "--target",
    type=click.Path(file_okay=False),
    default=DEFAULT_TARGET_DIR,
    show_default=True,
    help="Output directory for the CII files (UBL2CII_TARGET_DIR)",
)
@click.option(
    "--output-suffix",
    default=DEFAULT_OUTPUT_SUFFIX,
    show_default=True,
    help="Suffix appended to the base name of each output file",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--disable-wildcard-expansion",
    is_flag=True,
    help="Treat *, ? and [] in SOURCES literally",
)
def convert(sources, target, output_suffix, verbose, disable_wildcard_expansion):
    """Convert UBL files, directories or glob patterns to CII."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not sources:
        click.echo("Please pass at least one file, directory or pattern.")
        return

    files = _expand_sources(sources, not disable_wildcard_expansion)
    if not files:
        click.echo("No readable input files.")
        return

    target_dir = Path(target)
    target_dir.mkdir(parents=True, exist_ok=True)

    converted = sum(_convert_file(f, target_dir, output_suffix) for f in files)
    log.info("Converted %d of %d file(s)", converted, len(files))


@main.command()
@click.argument("invoice", type=click.Path(exists=True, dir_okay=False))
def taxes(invoice):
    """Show tax amounts per category and check them against the tax total."""
    try:
        df, total, ok = analyze_taxes(invoice)
    except ValueError as e:
        click.echo(f"[ERROR] {invoice}: {e}")
        return
    click.echo(df.to_string(index=False))
    status = "OK" if ok else "MISMATCH"
    click.echo(f"{status}: declared tax total {total}")


if __name__ == "__main__":
    main()
