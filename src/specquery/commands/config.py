"""``specquery config`` -- view and modify the user configuration.

Settings live in ``config.json`` under the specquery config directory and
are validated against :class:`~specquery.models.GlobalConfig` before every
save.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from specquery.exit_codes import EXIT_INVALID_USAGE
from specquery.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the stored user configuration.

    Example::

        specquery config show --json
    """
    from specquery.config import global_config_path, load_global_config

    config = load_global_config()
    info(f"Config file: {global_config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key in dot notation, e.g. 'cache.ttl_seconds'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set one configuration value.

    The string is coerced to the type of the existing field (bool, int,
    float or str).

    Example::

        specquery config set cache.ttl_seconds 600
        specquery config set validate_spec false
    """
    from specquery.config import load_global_config, save_global_config
    from specquery.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    *parents, last = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]
    if last not in target or isinstance(target[last], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[last]
    if isinstance(current, bool):
        target[last] = value.lower() in ("true", "1", "yes", "on")
    else:
        target[last] = value

    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(config)
    success(f"Set {key} = {target[last]}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Reset the configuration to defaults."""
    from specquery.config import save_global_config
    from specquery.models import GlobalConfig

    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
