"""chainsql compilation layer: statement state → parameterized SQL."""
from chainsql.compile.assembler import SQLAssembler
from chainsql.compile.base import CompiledSQL
from chainsql.compile.clause_builders import FromClauseBuilder, JoinClauseBuilder, UnionBuilder
from chainsql.compile.conditions import MISSING, ConditionCompiler, ConditionResolver

__all__ = [
    "CompiledSQL",
    "SQLAssembler",
    "ConditionCompiler",
    "ConditionResolver",
    "FromClauseBuilder",
    "JoinClauseBuilder",
    "UnionBuilder",
    "MISSING",
]
