class PipelineError(Exception):
    """Base class for failures that abort a publishing pipeline."""


class NetworkError(PipelineError):
    """Raised when the remote API cannot be reached."""


class ApiError(PipelineError):
    """Raised when the remote API answers with an unexpected status."""

    def __init__(self, status: int, body: str, method: str = "", url: str = "") -> None:
        self.status = status
        self.body = body
        self.method = method
        self.url = url
        super().__init__(f"Got status {status} from GitHub for {method} {url}".rstrip())


class BuildError(PipelineError):
    """Raised when the external build step fails."""

    def __init__(self, message: str, command=None, returncode=None, stdout: str = "", stderr: str = "") -> None:
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)


class FilesystemError(PipelineError):
    """Raised when a workspace directory or file operation fails."""


class PayloadError(ValueError):
    """Raised when a webhook payload cannot be understood."""
