# git-helper Errors
# Error taxonomy shared by backends, dispatcher and CLI


class HelperError(Exception):
    """Base class for all git-helper errors.

    Each error carries the process exit code the CLI should use.
    """

    exit_code: int = 1

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UsageError(HelperError):
    """Missing or incomplete arguments. The CLI prints usage and exits 0."""

    exit_code = 0


class InvalidArgumentError(HelperError):
    """An argument was given but its value is not acceptable."""


class AlreadyTargetError(HelperError):
    """The current branch is already the target branch."""


class InvalidIndexError(HelperError):
    """A rollback index is missing, not a number, or out of range."""


class ExternalToolFailure(HelperError):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode or 1
