from __future__ import annotations

import json
from typing import Any, Optional

import typer

from akin.core.config.settings import Settings, SettingsError, load_and_merge
from akin.core.engine import expand_and_render, parse, summarize_template
from akin.core.errors import AkinError, TemplateLoadError
from akin.core.io.load_template import load_template, write_output
from akin.core.log import configure_logging

app = typer.Typer(add_completion=False, no_args_is_help=True)

FORMATS = ("text", "json")


class _SettingsFailure(Exception):
    def __init__(self, error: AkinError, exit_code: int) -> None:
        super().__init__(str(error))
        self.error = error
        self.exit_code = exit_code


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine debug traces to stderr"),
) -> None:
    """akin: expand templates with multi-valued variables."""
    configure_logging(verbose)


@app.command("render")
def render_cmd(
    path: str = typer.Argument(..., help="Path to a template file, or '-' for stdin"),
    out: Optional[str] = typer.Option(None, "--out", help="Write the expansion to this file"),
    settings_file: Optional[str] = typer.Option(
        None,
        "--settings-file",
        help="Optional YAML file overriding markers and serialization settings",
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Expand a template and print (or write) the result."""
    _check_format(format)

    def _emit_json(ok: bool, *, exit_code: int, errors: list[AkinError], output: str | None) -> None:
        payload = {
            "tool": "akin",
            "command": "render",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "output": output,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        settings = _load_settings(settings_file)
        text = load_template(path)
    except _SettingsFailure as f:
        if format == "json":
            _emit_json(False, exit_code=f.exit_code, errors=[f.error], output=None)
        _print_errors([f.error])
        raise typer.Exit(code=f.exit_code)
    except TemplateLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], output=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    file = None if path == "-" else path
    try:
        table, body = parse(text, settings, file=file)
        output = expand_and_render(table, body, settings)
    except AkinError as e:
        err = e.with_file(file)
        if format == "json":
            _emit_json(False, exit_code=2, errors=[err], output=None)
        _print_errors([err])
        raise typer.Exit(code=2)

    if out:
        write_output(out, output)

    if format == "json":
        _emit_json(True, exit_code=0, errors=[], output=output)
    if out:
        typer.echo(f"OK: wrote expansion to {out}")
    else:
        typer.echo(output)


@app.command("check")
def check_cmd(
    path: str = typer.Argument(..., help="Path to a template file, or '-' for stdin"),
    settings_file: Optional[str] = typer.Option(None, "--settings-file"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Parse a template without expanding it and summarize its variables."""
    _check_format(format)

    def _emit_json(ok: bool, *, exit_code: int, errors: list[AkinError], summary: dict | None) -> None:
        payload = {
            "tool": "akin",
            "command": "check",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        settings = _load_settings(settings_file)
        text = load_template(path)
    except _SettingsFailure as f:
        if format == "json":
            _emit_json(False, exit_code=f.exit_code, errors=[f.error], summary=None)
        _print_errors([f.error])
        raise typer.Exit(code=f.exit_code)
    except TemplateLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    try:
        table, body = parse(text, settings, file=None if path == "-" else path)
    except AkinError as e:
        if format == "json":
            _emit_json(False, exit_code=2, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=2)

    if format == "text":
        typer.echo(summarize_template(table, body))
        return

    from akin.core.expand.scope import count_blocks, duplication_factor

    summary = {
        "variables": {name: len(var.values) for name, var in table.items()},
        "block_count": count_blocks(body),
        "body_factor": duplication_factor(body, table),
    }
    _emit_json(True, exit_code=0, errors=[], summary=summary)


@app.command("settings")
def settings_cmd(
    settings_file: Optional[str] = typer.Option(
        None,
        "--settings-file",
        help="Optional YAML file overriding markers and serialization settings",
    ),
) -> None:
    """List the effective settings (defaults merged with --settings-file)."""
    try:
        settings = _load_settings(settings_file)
    except _SettingsFailure as f:
        _print_errors([f.error])
        raise typer.Exit(code=f.exit_code)

    typer.echo("Settings:")
    for key, value in sorted(settings.as_dict().items()):
        typer.echo(f"- {key}: {value!r}")


def _check_format(format: str) -> None:
    if format not in FORMATS:
        err = AkinError(
            code="E_UNKNOWN_FORMAT",
            message=f"unknown format: {format} (choose one of: {', '.join(FORMATS)})",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _load_settings(settings_file: str | None) -> Settings:
    try:
        return load_and_merge(settings_file)
    except FileNotFoundError:
        raise _SettingsFailure(
            AkinError(
                code="E_SETTINGS_FILE_NOT_FOUND",
                message=f"settings file not found: {settings_file}",
            ),
            exit_code=1,
        )
    except SettingsError as e:
        raise _SettingsFailure(
            AkinError(code="E_SETTINGS_FILE_INVALID", message=str(e), file=settings_file),
            exit_code=2,
        )


def _to_item(e: AkinError) -> dict[str, Any]:
    return {
        "kind": e.kind,
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "line": e.span.line if e.span else None,
        "column": e.span.column if e.span else None,
        "severity": "error",
    }


def _print_errors(errors: list[AkinError]) -> None:
    for e in errors:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="akin")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
