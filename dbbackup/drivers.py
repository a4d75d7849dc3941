"""Dump command builders, one per supported database driver."""
from __future__ import annotations

import shlex
from dataclasses import replace
from pathlib import Path
from typing import Dict, List

from .errors import InvalidParametersError, UnsupportedDriverError
from .types import ConnectionParams

DEFAULT_MYSQL_SOCKET = "/tmp/mysql.sock"
REDACTED = "***"


class DumpDriver:
    """Build the shell command that dumps one database into a file."""

    name: str = ""
    executable: str = ""

    def arguments(self, params: ConnectionParams) -> List[str]:
        raise NotImplementedError

    def environment(self, params: ConnectionParams) -> Dict[str, str]:
        """Extra environment variables the dump tool needs."""

        return {}

    def build_dump_command(
        self,
        params: ConnectionParams,
        output: Path,
        *,
        executable_prefix: str = "",
        redact: bool = False,
    ) -> str:
        if redact and params.password:
            params = replace(params, password=REDACTED)
        argv = [f"{executable_prefix}{self.executable}", *self.arguments(params)]
        return f"{shlex.join(argv)} > {shlex.quote(str(output))}"


class MysqlDriver(DumpDriver):
    name = "mysql"
    executable = "mysqldump"

    def arguments(self, params: ConnectionParams) -> List[str]:
        args = ["--hex-blob", "-h", str(params.host), "-u", str(params.user)]
        if params.password:
            args.append(f"-p{params.password}")
        args.extend(["-S", params.socket or DEFAULT_MYSQL_SOCKET, str(params.dbname)])
        return args


class PgsqlDriver(DumpDriver):
    name = "pgsql"
    executable = "pg_dump"

    def arguments(self, params: ConnectionParams) -> List[str]:
        args = ["-h", str(params.host), "-U", str(params.user)]
        # No default socket here: without one the flag is left out entirely.
        if params.socket:
            args.extend(["-k", params.socket])
        args.append(str(params.dbname))
        return args

    def environment(self, params: ConnectionParams) -> Dict[str, str]:
        if params.password:
            return {"PGPASSWORD": params.password}
        return {}


DRIVERS: Dict[str, DumpDriver] = {driver.name: driver for driver in (MysqlDriver(), PgsqlDriver())}


def get_driver(name: str) -> DumpDriver:
    try:
        return DRIVERS[name]
    except KeyError:
        raise UnsupportedDriverError(
            f"Database driver {name!r} is not supported (expected one of: {', '.join(sorted(DRIVERS))})"
        ) from None


def _check_params(params: ConnectionParams) -> None:
    missing = [label for label, value in (
        ("driver", params.driver),
        ("host", params.host),
        ("user", params.user),
        ("dbname", params.dbname),
    ) if not value]
    if missing:
        raise InvalidParametersError(f"Database parameters incomplete, missing: {', '.join(missing)}")


def build_dump_command(
    params: ConnectionParams,
    output: Path,
    *,
    executable_prefix: str = "",
    redact: bool = False,
) -> str:
    """Return a shell command that writes a dump of *params* to *output*.

    With *redact* the password is masked before quoting, for logs and reports.
    """

    _check_params(params)
    driver = get_driver(str(params.driver))
    return driver.build_dump_command(params, output, executable_prefix=executable_prefix, redact=redact)


__all__ = [
    "DEFAULT_MYSQL_SOCKET",
    "REDACTED",
    "DRIVERS",
    "DumpDriver",
    "MysqlDriver",
    "PgsqlDriver",
    "build_dump_command",
    "get_driver",
]
