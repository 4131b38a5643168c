"""Homebrew client implementation.

Lists, installs and removes formulae, casks and taps with the ``brew``
CLI, and Mac App Store apps with the ``mas`` CLI.
"""

import logging
import re
import subprocess

from craftbrew.clients.base import PackageManagerClient
from craftbrew.core.errors import ExecutionError, ProbeError
from craftbrew.models.package import Package, PackageKind
from craftbrew.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

# Output fragments that indicate a temporary failure worth retrying
_LOCK_PATTERN = re.compile(
    r"already locked|another active homebrew process|has already locked",
    re.IGNORECASE,
)
_NETWORK_PATTERN = re.compile(
    r"could not resolve host|failed to connect|connection (?:reset|refused)"
    r"|timed out|curl: \(\d+\)|network is unreachable",
    re.IGNORECASE,
)

# mas list: "497799835  Xcode  (15.0)"
_MAS_LINE_PATTERN = re.compile(r"^\s*(?P<id>\d+)\s+(?P<name>.+?)(?:\s+\((?P<version>[^)]*)\))?\s*$")

_BREW_ENV = {
    "HOMEBREW_NO_AUTO_UPDATE": "1",
    "HOMEBREW_NO_ENV_HINTS": "1",
}

_LIST_COMMANDS: dict[PackageKind, list[str]] = {
    PackageKind.FORMULA: ["brew", "list", "--formula", "--installed-on-request", "-1"],
    PackageKind.CASK: ["brew", "list", "--cask", "-1"],
    PackageKind.TAP: ["brew", "tap"],
    PackageKind.STORE_APP: ["mas", "list"],
}


def is_lock_error(output: str) -> bool:
    """Check if command output reports a held Homebrew lock."""
    return _LOCK_PATTERN.search(output) is not None


def is_transient_error(output: str) -> bool:
    """Check if command output reports a lock or network failure."""
    return is_lock_error(output) or _NETWORK_PATTERN.search(output) is not None


def _first_error_line(result: CommandResult) -> str:
    """Pick the most informative line of a failed command's output."""
    lines = [line.strip() for line in result.output.splitlines() if line.strip()]
    for line in lines:
        if line.lower().startswith("error"):
            return line
    return lines[0] if lines else f"exit status {result.returncode}"


def _as_flag(arg: str) -> str:
    """Turn a manifest arg ('appdir=~/Apps') into a CLI flag ('--appdir=~/Apps')."""
    return arg if arg.startswith("-") else f"--{arg}"


class HomebrewClient(PackageManagerClient):
    """Client for Homebrew and the Mac App Store.

    Formulae are listed with ``--installed-on-request`` so that
    dependencies pulled in by Homebrew never show up as removable.

    Attributes:
        timeout: Timeout in seconds for install and remove calls.
        list_timeout: Timeout in seconds for listing calls.
    """

    def __init__(self, timeout: float = 600.0, list_timeout: float = 60.0) -> None:
        """Initialize the client.

        Args:
            timeout: Timeout for install and remove calls.
            list_timeout: Timeout for listing installed packages.
        """
        self.timeout = timeout
        self.list_timeout = list_timeout

    @property
    def name(self) -> str:
        return "Homebrew"

    @property
    def supported_kinds(self) -> frozenset[PackageKind]:
        """Formulae, casks and taps; store apps only when mas is installed."""
        if not self.is_available():
            return frozenset()
        kinds = {PackageKind.FORMULA, PackageKind.CASK, PackageKind.TAP}
        if command_exists("mas"):
            kinds.add(PackageKind.STORE_APP)
        return frozenset(kinds)

    def is_available(self) -> bool:
        """Check if the brew CLI is available."""
        return command_exists("brew")

    def list_installed(self, kind: PackageKind) -> frozenset[Package]:
        """List installed packages of one kind.

        Args:
            kind: Package kind to list.

        Returns:
            Installed packages of that kind.

        Raises:
            ProbeError: If the listing command is missing, times out or fails.
        """
        if kind not in self.supported_kinds:
            tool = "mas" if kind == PackageKind.STORE_APP else "brew"
            raise ProbeError(
                f"Cannot list {kind.label} packages: '{tool}' is not available",
                hint=f"Install it with: brew install {tool}"
                if tool == "mas"
                else "Install Homebrew from https://brew.sh",
            )

        args = _LIST_COMMANDS[kind]
        logger.debug("Listing installed %s packages: %s", kind.label, " ".join(args))

        try:
            result = run_command(args, timeout=self.list_timeout, env=_BREW_ENV)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                f"Listing {kind.label} packages timed out after {self.list_timeout:.0f}s",
                retryable=True,
            ) from e
        except FileNotFoundError as e:
            raise ProbeError(f"Command not found: {args[0]}") from e

        if not result.success:
            output = result.output
            if is_lock_error(output):
                raise ProbeError(
                    f"Homebrew is locked by another process: {_first_error_line(result)}",
                    hint="Wait for the other brew process to finish, then retry.",
                    retryable=True,
                )
            raise ProbeError(
                f"'{' '.join(args)}' failed: {_first_error_line(result)}",
                retryable=is_transient_error(output),
            )

        return frozenset(self._parse_listing(kind, result.stdout))

    def _parse_listing(self, kind: PackageKind, stdout: str) -> list[Package]:
        packages: list[Package] = []
        for line in stdout.splitlines():
            text = line.strip()
            if not text:
                continue
            try:
                if kind == PackageKind.STORE_APP:
                    match = _MAS_LINE_PATTERN.match(text)
                    if match is None:
                        logger.warning("Ignoring unrecognised mas output: %r", text)
                        continue
                    packages.append(
                        Package.create(kind, match.group("name"), {"id": int(match.group("id"))})
                    )
                else:
                    packages.append(Package(kind=kind, name=text))
            except ValueError as e:
                logger.warning("Ignoring unparsable %s entry %r: %s", kind.label, text, e)
        return packages

    def install(self, package: Package) -> str:
        """Install a single package.

        Args:
            package: Package to install.

        Returns:
            Short success message.

        Raises:
            ExecutionError: If the installation fails.
        """
        if package.version is not None:
            logger.warning(
                "Cannot install %s at pinned version %s, installing the current version",
                package,
                package.version,
            )

        attrs = package.attrs
        args_attr = attrs.get("args", ())
        extra = [_as_flag(a) for a in args_attr] if isinstance(args_attr, tuple) else []

        if package.kind == PackageKind.FORMULA:
            self._run(package, ["brew", "install", "--formula", package.name, *extra])
            if attrs.get("link") is False:
                self._run(package, ["brew", "unlink", package.name])
            if attrs.get("restart_service") is True:
                self._run(package, ["brew", "services", "restart", package.name])
        elif package.kind == PackageKind.CASK:
            self._run(package, ["brew", "install", "--cask", package.name, *extra])
        elif package.kind == PackageKind.TAP:
            url = attrs.get("url")
            tap_args = ["brew", "tap", package.name]
            if isinstance(url, str):
                tap_args.append(url)
            self._run(package, tap_args)
        else:
            self._run(package, ["mas", "install", str(self._require_store_id(package))])

        return f"Installed {package}"

    def remove(self, package: Package) -> str:
        """Remove a single package.

        Args:
            package: Package to remove.

        Returns:
            Short success message.

        Raises:
            ExecutionError: If the removal fails.
        """
        if package.kind == PackageKind.FORMULA:
            self._run(package, ["brew", "uninstall", "--formula", package.name])
        elif package.kind == PackageKind.CASK:
            self._run(package, ["brew", "uninstall", "--cask", package.name])
        elif package.kind == PackageKind.TAP:
            self._run(package, ["brew", "untap", package.name])
        else:
            self._run(package, ["mas", "uninstall", str(self._require_store_id(package))])

        return f"Removed {package}"

    def _require_store_id(self, package: Package) -> int:
        store_id = package.store_id
        if store_id is None:
            raise ExecutionError(
                f"{package} has no App Store id",
                package=str(package),
            )
        return store_id

    def _run(self, package: Package, args: list[str]) -> CommandResult:
        """Run one mutating command and classify its failure.

        Raises:
            ExecutionError: With ``transient=True`` for timeouts, network
                failures and a held Homebrew lock.
        """
        logger.info("Executing: %s", " ".join(args))
        try:
            # Own session: Ctrl-C should stop craftbrew between packages, not mid-install
            result = run_command(args, timeout=self.timeout, env=_BREW_ENV, new_session=True)
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"'{' '.join(args)}' timed out after {self.timeout:.0f}s",
                package=str(package),
                transient=True,
            ) from e
        except FileNotFoundError as e:
            raise ExecutionError(f"Command not found: {args[0]}", package=str(package)) from e
        except OSError as e:
            raise ExecutionError(f"Cannot run {args[0]}: {e}", package=str(package)) from e

        if not result.success:
            raise ExecutionError(
                _first_error_line(result),
                package=str(package),
                transient=is_transient_error(result.output),
            )
        return result
