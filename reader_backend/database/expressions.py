"""
Composable boolean expressions for entry queries.

Each filter contributes one term; terms are combined with All/Any and only
turned into SQL at the last moment. Every value is bound as a parameter and
the SQL text comes only from column names and operators defined in this
package.
"""

from dataclasses import dataclass
from typing import Any as AnyValue

_OPERATORS = frozenset({"=", "!=", "<", "<=", ">", ">="})


@dataclass(frozen=True)
class Column:
    """A column reference, optionally pinned to a table alias."""
    name: str
    table: str | None = None

    def sql(self, alias: str | None) -> str:
        table = self.table or alias
        return f"{table}.{self.name}" if table else self.name


@dataclass(frozen=True)
class Subquery:
    """A single-column SELECT written by a repository, with its parameters."""
    sql: str
    params: tuple = ()


class Expression:
    """Base class for boolean terms."""

    def compile(self, alias: str | None = None) -> tuple[str, list]:
        raise NotImplementedError


@dataclass(frozen=True)
class Compare(Expression):
    column: Column
    op: str
    value: AnyValue

    def __post_init__(self):
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {self.op}")

    def compile(self, alias: str | None = None) -> tuple[str, list]:
        if self.value is None:
            if self.op == "=":
                return f"{self.column.sql(alias)} IS NULL", []
            if self.op == "!=":
                return f"{self.column.sql(alias)} IS NOT NULL", []
            raise ValueError(f"Cannot compare NULL with {self.op}")
        return f"{self.column.sql(alias)} {self.op} ?", [self.value]


@dataclass(frozen=True)
class InList(Expression):
    column: Column
    values: tuple
    negate: bool = False

    def compile(self, alias: str | None = None) -> tuple[str, list]:
        if not self.values:
            # x IN () matches nothing; x NOT IN () matches everything
            return ("1 = 1" if self.negate else "1 = 0"), []
        placeholders = ", ".join("?" * len(self.values))
        keyword = "NOT IN" if self.negate else "IN"
        return f"{self.column.sql(alias)} {keyword} ({placeholders})", list(self.values)


@dataclass(frozen=True)
class InSubquery(Expression):
    column: Column
    subquery: Subquery
    negate: bool = False

    def compile(self, alias: str | None = None) -> tuple[str, list]:
        keyword = "NOT IN" if self.negate else "IN"
        return f"{self.column.sql(alias)} {keyword} ({self.subquery.sql})", list(self.subquery.params)


class _Group(Expression):
    joiner = ""
    identity = ""

    def __init__(self, *terms: Expression):
        self.terms = tuple(terms)

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.terms == other.terms

    def __hash__(self) -> int:
        return hash((type(self), self.terms))

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self.terms!r}"

    def compile(self, alias: str | None = None) -> tuple[str, list]:
        if not self.terms:
            return self.identity, []
        parts = []
        params: list = []
        for term in self.terms:
            sql, term_params = term.compile(alias)
            parts.append(f"({sql})")
            params.extend(term_params)
        return f" {self.joiner} ".join(parts), params


class All(_Group):
    """Conjunction; an empty All is true."""
    joiner = "AND"
    identity = "1 = 1"


class Any(_Group):
    """Disjunction; an empty Any is false."""
    joiner = "OR"
    identity = "1 = 0"


def keyset_after(
    sort_column: Column,
    id_column: Column,
    sort_value: AnyValue,
    id_value: str,
    descending: bool,
) -> Expression:
    """
    Strict boundary for keyset pagination over (sort_column, id_column).

    Rows strictly after (sort_value, id_value) in the given direction;
    ties on the sort key fall back to the id in the same direction.
    """
    op = "<" if descending else ">"
    return Any(
        Compare(sort_column, op, sort_value),
        All(
            Compare(sort_column, "=", sort_value),
            Compare(id_column, op, id_value),
        ),
    )
