"""patcred -- GitLab personal access token credentials.

This package provides a single pluggable credential type: a GitLab
personal access token held behind an opaque :class:`~patcred.secret.Secret`
wrapper, together with the "check as you type" validation rule used before
the token is saved.

Typical usage::

    from patcred.credentials import PersonalAccessTokenImpl
    from patcred.validation import validate_token

    result = validate_token("glpat0123456789abcde")
    if result.is_ok:
        cred = PersonalAccessTokenImpl.create(None, None, "CI bot", "glpat0123456789abcde")

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and master key management.
    secret: Opaque secret wrapper and Fernet-based secret cipher.
    validation: Form validation results and the token check.
    credentials: Credential types, descriptors, and the registry.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
