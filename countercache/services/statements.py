from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from countercache.core.errors import DescriptorError

# Every temporary aggregate table starts with this prefix; cleanup relies on it.
TEMP_TABLE_PREFIX = "counter_tmp_"
TEMP_TABLE_PATTERN = rf"^{TEMP_TABLE_PREFIX}[A-Za-z0-9_]+$"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TYPE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_:]*$")

# PostgreSQL truncates longer names; leave room for the "_idx" suffix.
_MAX_TEMP_TABLE_LENGTH = 59


@dataclass(frozen=True)
class Statement:
    sql: str

    def __str__(self) -> str:
        return self.sql


def _check_identifier(label: str, value: str) -> None:
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise DescriptorError(f"Invalid {label}: {value!r}")


def _check_temp_table(name: str) -> None:
    _check_identifier("temporary table name", name)
    if len(name) > _MAX_TEMP_TABLE_LENGTH:
        raise DescriptorError(f"Temporary table name too long: {name}")


def _sql(*parts: str | None) -> Statement:
    return Statement(" ".join(p for p in parts if p))


@dataclass(frozen=True)
class AssociationDescriptor:
    """How to recount one counter column from a related table.

    For polymorphic associations both ``polymorphic_type_column`` (e.g.
    ``item_type``) and ``polymorphic_type`` (the owning type name stored in it,
    e.g. ``Anime``) must be given.
    """

    owning_table: str
    related_table: str
    foreign_key: str
    counter_column: str
    polymorphic_type_column: str | None = None
    polymorphic_type: str | None = None
    where: str | None = None
    primary_key: str = "id"

    def __post_init__(self) -> None:
        _check_identifier("owning table", self.owning_table)
        _check_identifier("related table", self.related_table)
        _check_identifier("foreign key", self.foreign_key)
        _check_identifier("counter column", self.counter_column)
        _check_identifier("primary key", self.primary_key)

        if (self.polymorphic_type_column is None) != (self.polymorphic_type is None):
            raise DescriptorError(
                f"{self.owning_table}.{self.counter_column}: polymorphic associations need both "
                "a discriminator column and a type name"
            )
        if self.polymorphic_type_column is not None:
            _check_identifier("discriminator column", self.polymorphic_type_column)
            if not isinstance(self.polymorphic_type, str) or not _TYPE_NAME_RE.match(self.polymorphic_type):
                raise DescriptorError(f"Invalid polymorphic type name: {self.polymorphic_type!r}")

        if self.where is not None:
            if not self.where.strip():
                raise DescriptorError(f"{self.owning_table}.{self.counter_column}: empty filter")
            if ";" in self.where:
                raise DescriptorError(f"Filter must be a single condition: {self.where!r}")

        _check_temp_table(self.temp_table)

    @property
    def is_polymorphic(self) -> bool:
        return self.polymorphic_type_column is not None

    @property
    def temp_table(self) -> str:
        return f"{TEMP_TABLE_PREFIX}{self.owning_table}_{self.related_table}"

    @property
    def grouping_columns(self) -> list[str]:
        if self.is_polymorphic:
            return [self.polymorphic_type_column, self.foreign_key]
        return [self.foreign_key]

    def type_condition(self, qualifier: str | None = None) -> str | None:
        if not self.is_polymorphic:
            return None
        column = self.polymorphic_type_column
        if qualifier:
            column = f"{qualifier}.{column}"
        return f"{column} = '{self.polymorphic_type}'"

    def filter_condition(self) -> str | None:
        conditions = [c for c in (self.where, self.type_condition()) if c]
        if not conditions:
            return None
        if len(conditions) == 1:
            return conditions[0]
        return " AND ".join(f"({c})" for c in conditions)


@dataclass(frozen=True)
class RatingFrequencyDescriptor:
    owning_table: str
    foreign_key: str
    valid_ratings: tuple[Decimal, ...]
    source_table: str = "library_entries"
    rating_column: str = "rating"
    target_column: str = "rating_frequencies"
    primary_key: str = "id"

    def __post_init__(self) -> None:
        _check_identifier("owning table", self.owning_table)
        _check_identifier("foreign key", self.foreign_key)
        _check_identifier("rating source table", self.source_table)
        _check_identifier("rating column", self.rating_column)
        _check_identifier("target column", self.target_column)
        _check_identifier("primary key", self.primary_key)

        try:
            ratings = tuple(Decimal(str(r)) for r in self.valid_ratings)
        except (InvalidOperation, TypeError) as exc:
            raise DescriptorError(f"Invalid rating values: {self.valid_ratings!r}") from exc
        if not ratings:
            raise DescriptorError(f"{self.owning_table}: no valid ratings given")
        if any(not r.is_finite() for r in ratings):
            raise DescriptorError(f"Rating values must be finite: {self.valid_ratings!r}")
        if len(set(ratings)) != len(ratings):
            raise DescriptorError(f"Duplicate rating values: {self.valid_ratings!r}")
        object.__setattr__(self, "valid_ratings", ratings)

        _check_temp_table(self.temp_table)

    @property
    def temp_table(self) -> str:
        return f"{TEMP_TABLE_PREFIX}{self.owning_table}_{self.source_table}_ratings"

    @property
    def rating_keys(self) -> list[str]:
        return [format(r, "f") for r in self.valid_ratings]


def build_drop_leftover_statement(table: str) -> Statement:
    """Drop a leftover aggregate table by the exact name the store reports.

    The name is quoted so PostgreSQL does not fold it to lower case.
    """

    if not re.match(TEMP_TABLE_PATTERN, table):
        raise DescriptorError(f"Not a counter aggregate table: {table!r}")
    return _sql("DROP TABLE IF EXISTS", f'"{table}"')


def _temp_table_lifecycle(
    temp: str,
    *,
    select: Statement,
    columns: list[str],
    update: Statement,
) -> list[Statement]:
    cols = ", ".join(columns)
    return [
        _sql("DROP TABLE IF EXISTS", temp),
        _sql("CREATE TEMP TABLE", temp, "AS", select.sql),
        _sql(f"CREATE INDEX {temp}_idx ON {temp} ({cols})"),
        _sql("ANALYZE", temp),
        update,
        _sql("DROP TABLE", temp),
    ]


def build_association_count_statements(descriptor: AssociationDescriptor) -> list[Statement]:
    """Statements that recount ``descriptor.counter_column`` for every owning row."""

    d = descriptor
    temp = d.temp_table
    cols = ", ".join(d.grouping_columns)
    condition = d.filter_condition()

    select = _sql(
        f"SELECT {cols}, count(*) AS count",
        f"FROM {d.related_table}",
        f"WHERE {condition}" if condition else None,
        f"GROUP BY {cols}",
    )

    lookup = [f"{temp}.{d.foreign_key} = {d.owning_table}.{d.primary_key}"]
    type_condition = d.type_condition(qualifier=temp)
    if type_condition:
        lookup.append(type_condition)

    update = _sql(
        f"UPDATE {d.owning_table}",
        f"SET {d.counter_column} = COALESCE((",
        f"SELECT {temp}.count FROM {temp}",
        "WHERE " + " AND ".join(lookup),
        "), 0)",
    )

    return _temp_table_lifecycle(temp, select=select, columns=d.grouping_columns, update=update)


def _hstore_frequencies(pairs: list[tuple[str, str]]) -> str:
    items = ", ".join(f"'{key}', {count}::text" for key, count in pairs)
    return f"ARRAY[{items}]::text[]::hstore"


def _json_frequencies(pairs: list[tuple[str, str]]) -> str:
    items = ", ".join(f"'{key}', {count}" for key, count in pairs)
    return f"json_object({items})"


_FREQUENCY_ENCODERS = {
    "postgresql": _hstore_frequencies,
    "sqlite": _json_frequencies,
}


def build_rating_frequency_statements(
    descriptor: RatingFrequencyDescriptor,
    *,
    dialect: str = "postgresql",
) -> list[Statement]:
    """Statements that rebuild the per-rating count map of every owning row.

    The map always has one entry per valid rating, in declared order.
    """

    d = descriptor
    encode = _FREQUENCY_ENCODERS.get(dialect)
    if encode is None:
        raise DescriptorError(f"Rating frequencies are not supported on {dialect}")

    temp = d.temp_table
    columns = [d.foreign_key, d.rating_column]
    cols = ", ".join(columns)

    select = _sql(
        f"SELECT {cols}, count(*) AS count",
        f"FROM {d.source_table}",
        f"WHERE {d.foreign_key} IS NOT NULL AND {d.rating_column} IS NOT NULL",
        f"GROUP BY {cols}",
    )

    pairs = []
    for key in d.rating_keys:
        count = (
            f"COALESCE((SELECT {temp}.count FROM {temp} "
            f"WHERE {temp}.{d.foreign_key} = {d.owning_table}.{d.primary_key} "
            f"AND {temp}.{d.rating_column} = {key}), 0)"
        )
        pairs.append((key, count))

    update = _sql(f"UPDATE {d.owning_table}", f"SET {d.target_column} = {encode(pairs)}")

    return _temp_table_lifecycle(temp, select=select, columns=columns, update=update)
