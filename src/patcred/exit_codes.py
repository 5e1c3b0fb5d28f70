"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~patcred.exceptions.PatcredError` subclass.
Shell wrappers can inspect the exit code to tell a rejected token apart
from a broken configuration without parsing stderr.

Example::

    $ patcred check-token short
    $ echo $?
    3   # EXIT_VALIDATION_FAILURE -- the token was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_VALIDATION_FAILURE = 3
"""A candidate value failed validation with a blocking error."""

EXIT_PLUGIN_ERROR = 10
"""A credential type failed to load or is not registered."""
