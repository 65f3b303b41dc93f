from __future__ import annotations

from pathlib import Path

import typer

from metric_timeline.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from metric_timeline.errors import FormatError
from metric_timeline.features.categories import parse_member_list
from metric_timeline.logging import configure_logging
from metric_timeline.pipeline.run_all import RunOutputs, run_timeline

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        return AppConfig()
    return load_config(config_path)


def _apply_member_overrides(cfg: AppConfig, members: list[str] | None) -> AppConfig:
    for override in members or []:
        name, separator, identifiers = override.partition("=")
        if not separator or not name.strip():
            raise typer.BadParameter(f"Expected NAME=ID1,ID2 for --members, got: {override}")
        try:
            category = cfg.category(name.strip())
        except KeyError:
            known = ", ".join(category.name for category in cfg.categories)
            raise typer.BadParameter(
                f"Unknown category '{name.strip()}'. Configured categories: {known}"
            ) from None
        category.members = parse_member_list(identifiers)
    return cfg


def _run(
    csv: Path,
    out: Path,
    config: Path | None,
    members: list[str] | None,
    **kwargs: object,
) -> RunOutputs:
    configure_logging()
    cfg = _apply_member_overrides(_load_app_config(config), members)
    try:
        return run_timeline(csv_path=csv, out_dir=out, config=cfg, **kwargs)
    except FormatError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _default_config() -> Path | None:
    return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None


CSV_OPTION = typer.Option(..., exists=True, readable=True, resolve_path=True)
OUT_OPTION = typer.Option(Path("out"), resolve_path=True)
CONFIG_OPTION = typer.Option(
    None,
    exists=True,
    readable=True,
    resolve_path=True,
    help="YAML config. Defaults to configs/default.yaml when present.",
)
MEMBERS_OPTION = typer.Option(
    None,
    help="Replace a category's members, e.g. expected=metric_A,metric_B. Repeatable.",
)
SELECT_OPTION = typer.Option(None, help="Identifier to emphasize. Repeatable.")
HOVER_OPTION = typer.Option(None, help="Identifier treated as hovered.")


@app.command()
def project(
    csv: Path = CSV_OPTION,
    out: Path = OUT_OPTION,
    config: Path | None = CONFIG_OPTION,
    members: list[str] | None = MEMBERS_OPTION,
) -> None:
    """Write timeline, legend and diagnostics tables plus a summary."""
    outputs = _run(csv, out, config or _default_config(), members, render=False)
    typer.echo(
        f"Timeline complete. Entries: {len(outputs.result.timeline)}, "
        f"legend: {len(outputs.result.legend)}, "
        f"diagnostics: {len(outputs.result.diagnostics)}"
    )


@app.command()
def render(
    csv: Path = CSV_OPTION,
    out: Path = OUT_OPTION,
    config: Path | None = CONFIG_OPTION,
    members: list[str] | None = MEMBERS_OPTION,
    select: list[str] | None = SELECT_OPTION,
    hover: str | None = HOVER_OPTION,
) -> None:
    """Write the chart payload and timeline figure."""
    outputs = _run(
        csv,
        out,
        config or _default_config(),
        members,
        selected=select or [],
        hovered=hover,
        tables=False,
    )
    typer.echo(f"Render complete. Figure: {outputs.figure}")


@app.command("run-all")
def run_all_command(
    csv: Path = CSV_OPTION,
    out: Path = OUT_OPTION,
    config: Path | None = CONFIG_OPTION,
    members: list[str] | None = MEMBERS_OPTION,
    select: list[str] | None = SELECT_OPTION,
    hover: str | None = HOVER_OPTION,
) -> None:
    """Write tables, summary, chart payload and figure in one command."""
    outputs = _run(
        csv,
        out,
        config or _default_config(),
        members,
        selected=select or [],
        hovered=hover,
    )
    typer.echo(f"Run complete. Summary: {outputs.summary} Figure: {outputs.figure}")


if __name__ == "__main__":
    app()
