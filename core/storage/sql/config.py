from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite:////var/opt/aip.sqlite3"


@dataclass(frozen=True)
class SQLConfig:
    """Connection configuration.

    `database_url` should come from environment (e.g. AIP_DATABASE_URL).
    Do not log it.
    """

    database_url: str = DEFAULT_DATABASE_URL
