"""User-facing message strings for the personal access token credential type.

Kept in one place so the CLI, the descriptor, and the tests agree on the
exact wording.
"""

PERSONAL_ACCESS_TOKEN_DISPLAY_NAME = "GitLab Personal Access Token"

TOKEN_REQUIRED = "token required"

TOKEN_WRONG_LENGTH = "wrong length"

TOKEN_LENGTH = 20
"""Length of a GitLab personal access token."""
