"""Config commands -- view and modify global configuration.

Provides the ``patcred config`` sub-command group for reading and updating
the user's global configuration file (:class:`~patcred.models.GlobalConfig`).
"""

from __future__ import annotations

import typer

from patcred.exit_codes import EXIT_INVALID_USAGE
from patcred.output import error, format_data, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        patcred config show
        patcred --json config show
    """
    from patcred.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_data(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'secrets.key_source')."
    ),
    value: str = typer.Argument(help="Value to set. Lists take comma-separated items."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. List fields such as
    ``plugins.disabled`` take a comma-separated value; an empty string
    clears them.

    Raises:
        typer.Exit: With code 2 if the key path is invalid or Pydantic
            validation fails.

    Example::

        patcred config set secrets.key_source env:PATCRED_MASTER_KEY
        patcred config set plugins.disabled legacy_token,other_token
    """
    from patcred.config import load_global_config, save_global_config
    from patcred.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    if isinstance(target[final_key], list):
        coerced = [item.strip() for item in value.split(",") if item.strip()]
    else:
        coerced = value
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except Exception as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")
