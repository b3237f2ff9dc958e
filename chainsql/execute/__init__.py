"""chainsql execution layer: driver boundary and bind-and-run executor."""
from chainsql.execute.driver import Driver, ParamType, PreparedStatement, classify
from chainsql.execute.executor import Executor
from chainsql.execute.sqlite import SQLiteDriver

__all__ = [
    "Driver",
    "PreparedStatement",
    "ParamType",
    "classify",
    "Executor",
    "SQLiteDriver",
]
