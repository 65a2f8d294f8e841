"""
Immutable Lucene ``query_string`` expression builder.

An expression is an ordered tuple of clauses joined by ``AND``. Clauses are
typed values (field, phrases, negation) and are rendered to text only when
the request body is built, so composing or extending an expression never
mutates a shared string.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple, Union


def quote(value: str) -> str:
    """Quote one phrase for query_string"""
    return '"' + str(value).replace('\\', '\\\\').replace('"', '\\"') + '"'


@dataclass(frozen=True)
class PhraseSet:
    """Quoted phrases joined by one boolean operator"""
    values: Tuple[str, ...]
    joiner: str = "OR"

    def render(self) -> str:
        return f" {self.joiner} ".join(quote(v) for v in self.values)


@dataclass(frozen=True)
class Terms:
    """``field:("a" OR "b")``, optionally negated"""
    field: str
    phrases: Tuple[PhraseSet, ...]
    negated: bool = False

    def render(self) -> str:
        body = " OR ".join(p.render() for p in self.phrases if p.values)
        text = f"{self.field}:({body})"
        return f"NOT {text}" if self.negated else text

    def renamed(self, old: str, new: str) -> "Terms":
        return replace(self, field=new) if self.field == old else self


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of field clauses, parenthesised when it has several branches"""
    branches: Tuple[Terms, ...]

    def render(self) -> str:
        rendered = [b.render() for b in self.branches]
        if len(rendered) == 1:
            return rendered[0]
        return "(" + " OR ".join(rendered) + ")"

    def renamed(self, old: str, new: str) -> "AnyOf":
        return AnyOf(tuple(b.renamed(old, new) for b in self.branches))


Clause = Union[Terms, AnyOf]


def field_terms(field: str, values: Iterable[str], negated: bool = False,
                joiner: str = "OR") -> Terms:
    """Clause over ``values``; renders ``field:()`` when there are none"""
    return Terms(field, (PhraseSet(tuple(values), joiner),), negated)


def terms(field: str, values: Iterable[str], negated: bool = False,
          joiner: str = "OR") -> Optional[Terms]:
    """Clause over ``values``, or None when the category is empty"""
    values = tuple(v for v in values if v)
    if not values:
        return None
    return field_terms(field, values, negated, joiner)


def exclude(fields: Iterable[str], values: Iterable[str]) -> Tuple[Terms, ...]:
    """One NOT clause per field over the same values"""
    values = tuple(v for v in values if v)
    if not values:
        return ()
    return tuple(field_terms(f, values, negated=True) for f in fields)


@dataclass(frozen=True)
class QueryExpression:
    clauses: Tuple[Clause, ...] = ()

    @classmethod
    def of(cls, *clauses: Optional[Clause]) -> "QueryExpression":
        return cls().and_(*clauses)

    def and_(self, *clauses: Optional[Clause]) -> "QueryExpression":
        """New expression with the given clauses appended; None is skipped"""
        added = tuple(c for c in clauses if c is not None)
        if not added:
            return self
        return QueryExpression(self.clauses + added)

    def extend(self, other: "QueryExpression") -> "QueryExpression":
        return QueryExpression(self.clauses + other.clauses)

    def renamed(self, old: str, new: str) -> "QueryExpression":
        """Same expression with every clause on ``old`` moved to ``new``"""
        return QueryExpression(tuple(c.renamed(old, new) for c in self.clauses))

    @property
    def is_empty(self) -> bool:
        return not self.clauses

    def render(self) -> str:
        return " AND ".join(c.render() for c in self.clauses)

    def __str__(self) -> str:
        return self.render()
