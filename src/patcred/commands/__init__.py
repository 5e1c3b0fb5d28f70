"""Built-in CLI sub-commands for patcred.

* :mod:`~patcred.commands.credentials` -- check, encrypt, and describe
  personal access tokens, and list credential types.
* :mod:`~patcred.commands.config` -- view and modify global settings.

Single commands are plain callback functions registered directly on the
root app; multi-command groups export a :class:`typer.Typer` sub-application.
"""
