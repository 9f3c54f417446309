"""Run a buildpack's ``pre-package`` script."""

from __future__ import annotations

import subprocess

from jamkit.exceptions import PrePackageError
from jamkit.utils.logger import get_logger
from jamkit.constants import PRE_PACKAGE_SHELL

logger = get_logger("pre_packager")

__all__ = ["PrePackager"]


class PrePackager:
    """Executes ``metadata.pre-package`` with ``bash -c`` in the buildpack root."""

    def execute(self, script: str, root_dir: str) -> None:
        """Run ``script`` with ``root_dir`` as working directory.

        An empty script is a no-op.

        Raises:
            PrePackageError: The shell could not be started or the script
                exited with a non-zero status.
        """
        if not script:
            return

        logger.info("Running pre-package script: %s", script)
        try:
            result = subprocess.run(
                [PRE_PACKAGE_SHELL, "-c", script],
                cwd=root_dir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise PrePackageError(f"{exc}", script=script) from exc

        for line in result.stdout.splitlines():
            logger.info("  %s", line)
        for line in result.stderr.splitlines():
            logger.debug("  %s", line)

        if result.returncode != 0:
            raise PrePackageError(
                f"exit status {result.returncode}",
                script=script,
                returncode=result.returncode,
                stderr=result.stderr,
            )
