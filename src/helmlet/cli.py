"""CLI for helmlet using Click.

Provides 'helmlet render' to render templates against merged values,
'helmlet values' to inspect the merged values, and 'helmlet init'.
"""

import json
import sys
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from helmlet import __version__
from helmlet.config import (
    ConfigError,
    HelmletSettings,
    discover_user_config,
    get_config_home,
    set_config_context,
)
from helmlet.exceptions import HelmletError, TemplateRenderError
from helmlet.logging_setup import configure_logging
from helmlet.render import (
    Renderer,
    build_context,
    find_templates,
    output_path_for,
    parse_delimiters,
    write_output,
)
from helmlet.values import ConflictPolicy, ValueTree, build_values

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _toml_string(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes
    return json.dumps(value, ensure_ascii=False)


def _delimiter_value(value: str) -> str:
    try:
        parse_delimiters(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    return value


def _check_delimiter(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> str | None:
    if value is None:
        return None
    return _delimiter_value(value)


def values_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that builds values."""
    f = click.option(
        "--conflict-policy",
        type=click.Choice([p.value for p in ConflictPolicy]),
        default=None,
        help="override: newer values win type conflicts; strict: fail on them",
    )(f)
    f = click.option(
        "--set",
        "set_values",
        multiple=True,
        help="Set values on the command line (key1=val1,key2=val2), can be repeated",
    )(f)
    f = click.option(
        "-f",
        "--value",
        "value_files",
        multiple=True,
        type=click.Path(dir_okay=False, path_type=Path),
        help="Values YAML file(s), can be specified multiple times",
    )(f)
    return f


def _with_overrides(settings: HelmletSettings, **cli_values: Any) -> HelmletSettings:
    """Return settings with non-None CLI option values applied on top."""
    overrides = {key: value for key, value in cli_values.items() if value is not None}
    if not overrides:
        return settings
    return HelmletSettings(**{**settings.model_dump(), **overrides})


def _build_values_or_exit(
    value_files: tuple[Path, ...],
    set_values: tuple[str, ...],
    policy: ConflictPolicy,
) -> ValueTree:
    try:
        return build_values(value_files, set_values, policy)
    except HelmletError as e:
        click.echo(f"Error with values file: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="helmlet")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Use specific settings file (skips discovery)",
)
@click.option(
    "-d",
    "--dir",
    "project_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project directory for settings discovery (default: current directory)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: WARNING)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    project_dir: Path | None,
    log_level: str | None,
) -> None:
    """helmlet - render templates against layered YAML values."""
    ctx.ensure_object(dict)

    # init writes the settings file, it doesn't read one
    if ctx.invoked_subcommand == "init":
        configure_logging(log_level.upper() if log_level else "WARNING")
        return

    if project_dir is None:
        project_dir = Path.cwd()
    project_dir = project_dir.resolve()

    set_config_context(project_dir, explicit_config=config_file)

    try:
        settings = HelmletSettings(**({"log_level": log_level} if log_level else {}))
    except (ConfigError, ValidationError, tomllib.TOMLDecodeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    configure_logging(settings.log_level)

    ctx.obj["settings"] = settings
    ctx.obj["project_dir"] = project_dir
    ctx.obj["config_file"] = config_file


def _process_template(
    renderer: Renderer,
    template: Path,
    output_path: Path | None,
    context: dict[str, Any],
) -> bool:
    """Render one template to a file or stdout. Returns False on failure."""
    try:
        text = renderer.render_file(template, context)
    except TemplateRenderError as e:
        click.echo(f"# {e}", err=True)
        return False

    if output_path is None:
        click.echo(text, nl=False)
        return True

    try:
        write_output(output_path, text)
    except OSError as e:
        click.echo(f"# Error writing to output file {output_path}: {e}", err=True)
        return False

    click.echo(f"# Output written to {output_path}")
    return True


@cli.command()
@values_options
@click.option(
    "-t",
    "--template",
    "template_files",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Template file(s), can be specified multiple times",
)
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory containing template files",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (when processing a single template)",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write output files",
)
@click.option(
    "--delimiter",
    default=None,
    callback=_check_delimiter,
    help="Template delimiter pair, e.g. '{{,}}'",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Strict mode (missing keys cause an error)",
)
@click.pass_context
def render(
    ctx: click.Context,
    value_files: tuple[Path, ...],
    set_values: tuple[str, ...],
    conflict_policy: str | None,
    template_files: tuple[Path, ...],
    template_dir: Path | None,
    output_file: Path | None,
    output_dir: Path | None,
    delimiter: str | None,
    strict: bool | None,
) -> None:
    """Render templates against merged values.

    Values files are merged in order, later files winning; --set overrides
    are applied last. Each template is written to --output-dir, to
    --output, or to stdout.

    Examples:

        \b
        # Render one template to stdout
        helmlet render -f values.yaml -t deploy.yaml

        \b
        # Layer values and override on the command line
        helmlet render -f base.yaml -f prod.yaml --set image.tag=1.2.3 -t deploy.yaml

        \b
        # Render a directory of templates
        helmlet render -f values.yaml --template-dir templates/ --output-dir out/
    """
    click.echo(f"# Helmlet version: {__version__}")

    if not template_files and template_dir is None:
        raise click.UsageError("Specify at least one --template or a --template-dir.")

    settings = _with_overrides(
        ctx.obj["settings"],
        delimiter=delimiter,
        strict=strict,
        conflict_policy=conflict_policy,
    )

    values = _build_values_or_exit(value_files, set_values, settings.conflict_policy)

    templates = list(template_files)
    if template_dir is not None:
        templates.extend(find_templates(template_dir, settings.template_suffixes))

    if not templates:
        click.echo("No templates found to process", err=True)
        sys.exit(1)

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)

    renderer = Renderer(settings.delimiters, strict=settings.strict)
    context = build_context(values)

    if len(templates) == 1 and output_file is not None:
        ok = _process_template(renderer, templates[0], output_file, context)
        if not ok:
            sys.exit(1)
        return

    failed = 0
    for template in templates:
        if output_dir is not None:
            output_path = output_path_for(template, output_dir)
        elif output_file is not None:
            output_path = output_file
        else:
            click.echo(f"\n# Processing template: {template}")
            click.echo("# -----------------------------------------------")
            output_path = None

        if not _process_template(renderer, template, output_path, context):
            failed += 1

    if failed:
        sys.exit(1)


@cli.command("values")
@values_options
@click.pass_context
def show_values(
    ctx: click.Context,
    value_files: tuple[Path, ...],
    set_values: tuple[str, ...],
    conflict_policy: str | None,
) -> None:
    """Print the merged values as YAML.

    Examples:

        \b
        helmlet values -f base.yaml -f prod.yaml --set replicas=3
    """
    settings = _with_overrides(ctx.obj["settings"], conflict_policy=conflict_policy)
    values = _build_values_or_exit(value_files, set_values, settings.conflict_policy)
    click.echo(yaml.safe_dump(values, sort_keys=False, default_flow_style=False), nl=False)


@cli.command()
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    help="Accept all defaults without prompting",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing config file",
)
def init(yes: bool, force: bool) -> None:
    """Initialize user settings.

    Creates the user config directory and populates it with a default
    config.toml file. By default, interactively prompts for each setting.

    Examples:

        \b
        # Interactive setup
        helmlet init

        \b
        # Accept all defaults
        helmlet init -y
    """
    config_home = get_config_home()
    config_file = config_home / "config.toml"

    existing_config = discover_user_config()
    if existing_config and not force:
        click.echo(f"Config file already exists: {existing_config}")
        if not click.confirm("Overwrite?", default=False):
            click.echo("Aborted.")
            sys.exit(0)

    config_home.mkdir(parents=True, exist_ok=True)

    fields = HelmletSettings.model_fields
    defaults = {
        "delimiter": fields["delimiter"].default,
        "strict": fields["strict"].default,
        "conflict_policy": fields["conflict_policy"].default.value,
        "log_level": fields["log_level"].default,
    }

    if yes:
        values = defaults
        click.echo("Using default configuration...")
    else:
        click.echo("Configure helmlet settings (press Enter to accept defaults):\n")

        values = {}
        values["delimiter"] = click.prompt(
            "Template delimiter",
            default=defaults["delimiter"],
            value_proc=_delimiter_value,
        )
        values["strict"] = click.confirm(
            "Fail on missing keys (strict mode)",
            default=defaults["strict"],
        )
        values["conflict_policy"] = click.prompt(
            "Conflict policy",
            default=defaults["conflict_policy"],
            type=click.Choice([p.value for p in ConflictPolicy]),
        )
        values["log_level"] = click.prompt(
            "Log level",
            default=defaults["log_level"],
            type=click.Choice(LOG_LEVELS, case_sensitive=False),
        )
        click.echo()

    toml_lines = [
        "# helmlet user configuration",
        "",
        f"delimiter = {_toml_string(values['delimiter'])}",
        f'strict = {str(values["strict"]).lower()}',
        f"conflict_policy = {_toml_string(values['conflict_policy'])}",
        f"log_level = {_toml_string(values['log_level'])}",
        "",
    ]
    config_file.write_text("\n".join(toml_lines))

    click.echo(f"Created config file: {config_file}")
    click.echo("\nConfiguration:")
    for key, value in values.items():
        click.echo(f"  {key}: {value}")


if __name__ == "__main__":
    cli()
