"""Pydantic model for per-statement configuration.

A single ``StatementConfig`` is passed to the root :class:`~chainsql.Statement`
and shared by reference with every nested statement it spawns (FROM
subqueries, union branches, condition groups)::

    from chainsql import Statement, StatementConfig

    config = StatementConfig(subquery_alias="sub", log_statements=False)
    users = Statement(driver, config).from_(lambda q: q.from_("users"))
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chainsql.errors import ConfigError


class StatementConfig(BaseModel):
    """Options that shape compiled SQL and executor logging.

    Attributes:
        subquery_alias: Alias given to a FROM subquery when the caller does
            not supply one.
        empty_group_predicate: Predicate emitted in place of a condition
            group whose callback added no conditions.
        log_statements: Log every executed SQL string at DEBUG level.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    subquery_alias: str = Field(default="t", min_length=1, pattern=r"^\w+$")
    empty_group_predicate: str = Field(default="1=1", min_length=1)
    log_statements: bool = True

    @classmethod
    def load(cls, data: dict[str, Any]) -> StatementConfig:
        """Build a config from a plain mapping (e.g. parsed settings file).

        Args:
            data: Raw option values.

        Returns:
            A validated, immutable ``StatementConfig``.

        Raises:
            ConfigError: If any option is unknown or invalid.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid statement configuration: {exc.error_count()} error(s).",
                errors=[dict(e) for e in exc.errors()],
            ) from exc
