"""chainsql schema layer: condition models, statement state, configuration."""
from chainsql.schema.conditions import (
    Condition,
    Connector,
    GroupCondition,
    MembershipCondition,
    NullCondition,
    SimpleCondition,
    SubqueryCondition,
)
from chainsql.schema.config import StatementConfig
from chainsql.schema.state import SourceRef, StatementState, UnionBranch

__all__ = [
    "Condition",
    "Connector",
    "SimpleCondition",
    "NullCondition",
    "MembershipCondition",
    "SubqueryCondition",
    "GroupCondition",
    "StatementConfig",
    "SourceRef",
    "StatementState",
    "UnionBranch",
]
