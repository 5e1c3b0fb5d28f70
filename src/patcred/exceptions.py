"""Exception hierarchy for patcred.

All exceptions inherit from :class:`PatcredError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`patcred.exit_codes`.
The top-level error handler in :func:`patcred.app.main` catches
``PatcredError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Token validation never raises; it returns a
:class:`~patcred.validation.FormValidation`.

Subclass hierarchy::

    PatcredError (exit 1)
    +-- PluginError   (exit 10)
    +-- ConfigError   (exit 1)
"""

from patcred.exit_codes import EXIT_GENERIC_FAILURE, EXIT_PLUGIN_ERROR


class PatcredError(Exception):
    """Base exception for all patcred errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`patcred.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class PluginError(PatcredError):
    """Raised when a credential type is unknown, registered twice, or given a foreign record."""

    exit_code = EXIT_PLUGIN_ERROR


class ConfigError(PatcredError):
    """Raised for configuration problems (invalid JSON, bad key sources, unusable keys)."""

    exit_code = EXIT_GENERIC_FAILURE
