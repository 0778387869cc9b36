"""
Composite filter construction.

A CompositeFilter is the disjunction, over every decomposed region, of
``sector.x = sx AND sector.y = sy AND x BETWEEN min_x AND max_x AND
y BETWEEN min_y AND max_y``. Regions are neither merged nor deduplicated,
so the filter has exactly one disjunct per region.

The disjuncts are ORed as a balanced tree of parenthesised halves, so the
expression depth grows with the logarithm of the region count. SQLite
rejects expressions nested deeper than 1000 levels.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from sqlalchemy import Table, and_, or_
from sqlalchemy.sql.elements import ColumnElement

from .models.coordinates import Region


@dataclass(frozen=True)
class CompositeFilter:
    """OR-of-ANDs predicate over (sector.x, sector.y, entity.x, entity.y)"""

    regions: Tuple[Region, ...]

    def __len__(self) -> int:
        return len(self.regions)

    def conjunctions(self, sector_table: Table, entity_table: Table) -> List[ColumnElement]:
        """One four-term AND clause per region, in region order"""
        return [
            and_(
                sector_table.c.x == region.sector_x,
                sector_table.c.y == region.sector_y,
                entity_table.c.x.between(region.min_x, region.max_x),
                entity_table.c.y.between(region.min_y, region.max_y),
            )
            for region in self.regions
        ]

    def to_expression(self, sector_table: Table, entity_table: Table) -> ColumnElement:
        """The full WHERE clause for the store"""
        return _balanced_or(self.conjunctions(sector_table, entity_table))

    def matches(self, sector_x: int, sector_y: int, x: int, y: int) -> bool:
        """Evaluate the predicate against a single location in memory"""
        return any(
            region.sector_x == sector_x
            and region.sector_y == sector_y
            and region.min_x <= x <= region.max_x
            and region.min_y <= y <= region.max_y
            for region in self.regions
        )


def _balanced_or(clauses: Sequence[ColumnElement]) -> ColumnElement:
    """OR the clauses with nesting depth logarithmic in their count"""
    if len(clauses) == 1:
        return clauses[0]
    middle = len(clauses) // 2
    # ungrouped, SQLAlchemy renders nested or_ as one flat chain
    return or_(
        _balanced_or(clauses[:middle]).self_group(),
        _balanced_or(clauses[middle:]).self_group(),
    )


def build_filter(regions: Sequence[Region]) -> CompositeFilter:
    """Build the composite filter for a non-empty region sequence"""
    if not regions:
        raise ValueError("cannot build a filter from an empty region sequence")
    return CompositeFilter(regions=tuple(regions))
