"""
Query description schemas for the visual query builder.

The JSON shape matches what the builder UI sends: camelCase keys and a
top-level ``from`` object. Operators and directions are kept as plain strings
so the builder, not request parsing, decides what is supported.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Condition operands are bound as single parameters
SCALAR_TYPES = (str, int, float, bool)
COMPARISON_OPERATORS = ("=", "!=", ">", "<", ">=", "<=")
ORDER_DIRECTIONS = ("ASC", "DESC")


class TableRef(BaseModel):
    name: str
    alias: Optional[str] = None


class ColumnRef(BaseModel):
    table: str
    column: str


class Condition(BaseModel):
    """A single WHERE condition; conditions are combined with AND."""

    model_config = ConfigDict(populate_by_name=True)

    left: ColumnRef
    operator: str
    right_value: Any = Field(default=None, alias="rightValue")
    right_column: Optional[ColumnRef] = Field(default=None, alias="rightColumn")
    between_values: Optional[List[Any]] = Field(default=None, alias="betweenValues")
    in_values: Optional[List[Any]] = Field(default=None, alias="inValues")


class OrderBy(BaseModel):
    column: ColumnRef
    direction: str = "ASC"


class QueryStructure(BaseModel):
    """Complete description of a builder query."""

    model_config = ConfigDict(populate_by_name=True)

    select: List[ColumnRef] = []
    from_: Optional[TableRef] = Field(default=None, alias="from")
    # Joins are not supported yet; any value is rejected by the builder.
    joins: Optional[List[Any]] = None
    where: List[Condition] = []
    group_by: List[ColumnRef] = Field(default=[], alias="groupBy")
    order_by: List[OrderBy] = Field(default=[], alias="orderBy")
    limit: Optional[int] = None
    distinct: bool = False


@dataclass
class BuiltQuery:
    """SQL text plus positional parameter values, in placeholder order."""

    sql: str
    params: List[Any] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.sql
        yield self.params


class QueryExecutionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sql: str
    rows: List[dict]
    row_count: int = Field(alias="rowCount")
