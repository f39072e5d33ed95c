import logging
import shlex
import subprocess
from pathlib import Path

from .errors import BuildError
from .objects import OUTPUT_SUFFIX

logger = logging.getLogger(__name__)

DEFAULT_BUILD_COMMAND = "harp compile {source} {output}"


class CommandBuilder:
    """Runs an external static-site build command over a source directory."""

    def __init__(self, command: str = DEFAULT_BUILD_COMMAND):
        self.command = command

    @classmethod
    def from_settings(cls) -> "CommandBuilder":
        from django.conf import settings

        return cls(settings.PAGES_BUILD_COMMAND)

    def command_args(self, source: Path, output: Path) -> list:
        """Split the command template, filling in only ``{source}`` and ``{output}``."""
        try:
            parts = shlex.split(self.command)
        except ValueError as exc:
            raise BuildError(f"Cannot parse build command {self.command!r}: {exc}") from exc
        if not parts:
            raise BuildError("Build command is empty")
        return [
            part.replace("{source}", str(source)).replace("{output}", str(output))
            for part in parts
        ]

    def __call__(self, source) -> Path:
        source = Path(source)
        output = source.with_name(source.name + OUTPUT_SUFFIX)
        args = self.command_args(source, output)
        logger.info("Building site: %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise BuildError(f"Cannot run build command {args[0]}: {exc}", command=args) from exc
        if result.returncode != 0:
            logger.error("Build failed (%s): %s", result.returncode, result.stderr)
            raise BuildError(
                f"Build command exited with {result.returncode}",
                command=args,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        if not output.is_dir():
            raise BuildError(f"Build produced no output directory at {output}", command=args, returncode=0)
        return output
