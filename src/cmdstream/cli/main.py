from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any

import typer

from cmdstream.config_loader import load_config
from cmdstream.errors import CommandStreamError, StreamExhausted
from cmdstream.facility import FileCommandFacility
from cmdstream.selector import open_stream
from cmdstream.streams.base import Record
from cmdstream.uri import parse_uri
from cmdstream.utils.stdout_guard import StdoutGuard

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)

STDOUT_URI = "file:///dev/stdout?fmt=jstream"


class LoggingDispatcher:
    """Dispatcher that only reports what it was asked to do."""

    def execute(self, command: Record) -> Any:
        logger.info("execute: %s", json.dumps(command, ensure_ascii=False))
        return "ok"


def _fail(e: Exception) -> typer.Exit:
    logger.error("%s", e)
    return typer.Exit(code=1)


@app.command("run")
def run(
    uri: str | None = typer.Argument(None, help="Command source, e.g. cmds.jstream"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to YAML/JSON config"),
) -> None:
    """Read commands from URI and execute each one until the stream ends."""
    with StdoutGuard():
        try:
            cfg = load_config(config)
            source = uri or cfg.uri
            if not source:
                raise RuntimeError("no command source given (argument, config or CMDSTREAM_URI)")
            facility = FileCommandFacility(source, LoggingDispatcher(), config=cfg)
            count = facility.run()
        except (CommandStreamError, RuntimeError) as e:
            raise _fail(e) from e
        except KeyboardInterrupt:
            logger.info("Received KeyboardInterrupt, shutting down.")
            return
        logger.info("Executed %d commands from %s", count, source)


@app.command("cat")
def cat(
    source: str = typer.Argument(..., help="Location to read records from"),
    dest: str = typer.Argument(STDOUT_URI, help="Location to write records to"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to YAML/JSON config"),
) -> None:
    """Copy records from SOURCE to DEST, converting between framings."""
    with StdoutGuard():
        try:
            cfg = load_config(config)
            count = 0
            with open_stream(source, "r", cfg) as src, open_stream(dest, "w", cfg) as dst:
                while True:
                    try:
                        record = src.get()
                    except StreamExhausted:
                        break
                    dst.put(record)
                    count += 1
        except (CommandStreamError, RuntimeError) as e:
            raise _fail(e) from e
        logger.info("Copied %d records from %s to %s", count, source, dest)


@app.command("describe")
def describe(
    uri: str = typer.Argument(..., help="Location string to resolve"),
    config: str | None = typer.Option(None, "--config", "-c", help="Path to YAML/JSON config"),
) -> None:
    """Print how URI resolves, without opening it."""
    with StdoutGuard():
        try:
            cfg = load_config(config)
            desc = parse_uri(uri, cfg.formats)
        except (CommandStreamError, RuntimeError) as e:
            raise _fail(e) from e
        out = dataclasses.asdict(desc) | {"framing": desc.framing.value}
        typer.echo(json.dumps(out, sort_keys=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
