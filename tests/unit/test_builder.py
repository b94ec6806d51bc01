"""
Unit tests for the visual query builder.
Tests clause ordering, parameter binding and rejection of unsafe descriptions.
"""

import pytest

from dotacion.query.builder import QueryBuilder, build_sql_from_query
from dotacion.query.exceptions import (
    ColumnNotAllowed,
    EmptySelect,
    InvalidBetween,
    InvalidColumnName,
    InvalidIdentifier,
    InvalidIn,
    InvalidLimit,
    InvalidOrderDirection,
    InvalidValue,
    MissingTable,
    TableNotAllowed,
    UnsupportedFeature,
    UnsupportedOperator,
)
from dotacion.query.schemas import QueryStructure

TABLE = "dotacion_gcba_prueba"


def col(name, table=TABLE):
    return {"table": table, "column": name}


def make_query(**overrides):
    data = {
        "select": [col("AYN")],
        "from": {"name": TABLE},
        "where": [{"left": col("MINISTERIO"), "operator": "=", "rightValue": "Salud"}],
    }
    data.update(overrides)
    return QueryStructure.model_validate(data)


class TestBuilderScenarios:
    """Reference queries sent by the builder UI"""

    def test_simple_where(self):
        sql, params = build_sql_from_query(make_query())
        assert sql == (
            "SELECT `dotacion_gcba_prueba`.`AYN` FROM `dotacion_gcba_prueba` "
            "WHERE `dotacion_gcba_prueba`.`MINISTERIO` = ?"
        )
        assert params == ["Salud"]

    def test_distinct(self):
        sql, params = build_sql_from_query(make_query(distinct=True))
        assert sql.startswith("SELECT DISTINCT `dotacion_gcba_prueba`.`AYN` FROM")
        assert params == ["Salud"]

    def test_joins_rejected(self):
        with pytest.raises(UnsupportedFeature):
            build_sql_from_query(make_query(joins=[{"table": "padron"}]))

    def test_empty_joins_allowed(self):
        sql, _ = build_sql_from_query(make_query(joins=[]))
        assert "JOIN" not in sql


class TestClauses:
    def test_full_clause_order(self):
        query = make_query(
            select=[col("MINISTERIO"), col("SEXO")],
            groupBy=[col("MINISTERIO"), col("SEXO")],
            orderBy=[{"column": col("MINISTERIO"), "direction": "DESC"}],
            limit=10,
        )
        sql, params = build_sql_from_query(query)
        assert sql == (
            "SELECT `dotacion_gcba_prueba`.`MINISTERIO`, `dotacion_gcba_prueba`.`SEXO` "
            "FROM `dotacion_gcba_prueba` "
            "WHERE `dotacion_gcba_prueba`.`MINISTERIO` = ? "
            "GROUP BY `dotacion_gcba_prueba`.`MINISTERIO`, `dotacion_gcba_prueba`.`SEXO` "
            "ORDER BY `dotacion_gcba_prueba`.`MINISTERIO` DESC "
            "LIMIT 10"
        )
        assert params == ["Salud"]

    def test_table_alias(self):
        sql, _ = build_sql_from_query(make_query(**{"from": {"name": TABLE, "alias": "d"}}))
        assert "FROM `dotacion_gcba_prueba` AS `d`" in sql

    def test_invalid_alias(self):
        with pytest.raises(InvalidIdentifier):
            build_sql_from_query(make_query(**{"from": {"name": TABLE, "alias": "d; DROP"}}))

    def test_no_where_no_limit(self):
        sql, params = build_sql_from_query(make_query(where=[]))
        assert sql == "SELECT `dotacion_gcba_prueba`.`AYN` FROM `dotacion_gcba_prueba`"
        assert params == []

    def test_limit_clamped(self):
        sql, _ = build_sql_from_query(make_query(limit=1_000_000))
        assert sql.endswith("LIMIT 50000")

    def test_limit_clamped_to_builder_maximum(self):
        sql, _ = QueryBuilder(max_limit=100).build(make_query(limit=500))
        assert sql.endswith("LIMIT 100")

    def test_limit_zero(self):
        sql, _ = build_sql_from_query(make_query(limit=0))
        assert sql.endswith("LIMIT 0")

    def test_negative_limit(self):
        with pytest.raises(InvalidLimit):
            build_sql_from_query(make_query(limit=-1))

    def test_order_direction_must_be_upper_case(self):
        with pytest.raises(InvalidOrderDirection):
            build_sql_from_query(make_query(orderBy=[{"column": col("AYN"), "direction": "desc"}]))


class TestConditions:
    def build_where(self, *conditions):
        return build_sql_from_query(make_query(where=list(conditions)))

    @pytest.mark.parametrize("operator", ["=", "!=", ">", "<", ">=", "<="])
    def test_comparison_operators(self, operator):
        sql, params = self.build_where({"left": col("ROL"), "operator": operator, "rightValue": 5})
        assert sql.endswith(f"WHERE `dotacion_gcba_prueba`.`ROL` {operator} ?")
        assert params == [5]

    @pytest.mark.parametrize("operator", [" >= ", ">= ", "\tIN"])
    def test_padded_operators_rejected(self, operator):
        with pytest.raises(UnsupportedOperator):
            self.build_where({"left": col("ROL"), "operator": operator, "rightValue": 5, "inValues": [5]})

    @pytest.mark.parametrize(
        "condition",
        [
            {"operator": "=", "rightValue": ["Salud", "x"]},
            {"operator": "LIKE", "rightValue": {"a": 1}},
            {"operator": "BETWEEN", "betweenValues": [[1], 2]},
            {"operator": "IN", "inValues": ["Salud", {"x": 1}]},
        ],
    )
    def test_non_scalar_operands_rejected(self, condition):
        with pytest.raises(InvalidValue):
            self.build_where({"left": col("MINISTERIO"), **condition})

    def test_null_operand_bound(self):
        _, params = self.build_where({"left": col("MAIL_MIA"), "operator": "=", "rightValue": None})
        assert params == [None]

    def test_column_comparison(self):
        sql, params = self.build_where(
            {"left": col("MAIL_LABORAL"), "operator": "!=", "rightColumn": col("MAIL_PERSONAL")}
        )
        assert sql.endswith(
            "WHERE `dotacion_gcba_prueba`.`MAIL_LABORAL` != `dotacion_gcba_prueba`.`MAIL_PERSONAL`"
        )
        assert params == []

    def test_like(self):
        sql, params = self.build_where({"left": col("AYN"), "operator": "LIKE", "rightValue": "%Pérez%"})
        assert sql.endswith("`AYN` LIKE ?")
        assert params == ["%Pérez%"]

    def test_between_keeps_value_order(self):
        sql, params = self.build_where(
            {"left": col("INGRESO"), "operator": "BETWEEN", "betweenValues": ["2020-01-01", "2020-12-31"]}
        )
        assert sql.endswith("`INGRESO` BETWEEN ? AND ?")
        assert params == ["2020-01-01", "2020-12-31"]

    @pytest.mark.parametrize("values", [None, [], ["2020-01-01"], [1, 2, 3]])
    def test_between_requires_two_values(self, values):
        with pytest.raises(InvalidBetween):
            self.build_where({"left": col("INGRESO"), "operator": "BETWEEN", "betweenValues": values})

    def test_in(self):
        sql, params = self.build_where(
            {"left": col("MINISTERIO"), "operator": "IN", "inValues": ["Salud", "Educación"]}
        )
        assert sql.endswith("`MINISTERIO` IN (?, ?)")
        assert params == ["Salud", "Educación"]

    def test_in_requires_values(self):
        with pytest.raises(InvalidIn):
            self.build_where({"left": col("MINISTERIO"), "operator": "IN", "inValues": []})

    def test_conditions_joined_with_and(self):
        sql, params = self.build_where(
            {"left": col("MINISTERIO"), "operator": "=", "rightValue": "Salud"},
            {"left": col("ROL"), "operator": ">", "rightValue": 100},
        )
        assert "WHERE `dotacion_gcba_prueba`.`MINISTERIO` = ? AND `dotacion_gcba_prueba`.`ROL` > ?" in sql
        assert params == ["Salud", 100]

    @pytest.mark.parametrize("operator", ["like", "NOT IN", "OR", "= 1 OR 1 ="])
    def test_unsupported_operators(self, operator):
        with pytest.raises(UnsupportedOperator):
            self.build_where({"left": col("AYN"), "operator": operator, "rightValue": "x"})

    def test_values_never_inlined(self):
        sql, params = self.build_where({"left": col("AYN"), "operator": "=", "rightValue": "x' OR '1'='1"})
        assert "OR '1'" not in sql
        assert params == ["x' OR '1'='1"]


class TestRejections:
    def test_missing_table(self):
        with pytest.raises(MissingTable):
            build_sql_from_query(make_query(**{"from": None}))

    def test_table_not_allowed(self):
        with pytest.raises(TableNotAllowed):
            build_sql_from_query(make_query(**{"from": {"name": "usuarios"}}))

    def test_empty_select(self):
        with pytest.raises(EmptySelect):
            build_sql_from_query(make_query(select=[]))

    def test_invalid_column_name(self):
        with pytest.raises(InvalidColumnName):
            build_sql_from_query(make_query(select=[col("AYN`; DROP TABLE x; --")]))

    def test_column_not_allowed(self):
        with pytest.raises(ColumnNotAllowed):
            build_sql_from_query(make_query(select=[col("PASSWORD")]))

    def test_where_column_validated(self):
        with pytest.raises(TableNotAllowed):
            build_sql_from_query(
                make_query(where=[{"left": col("x", table="usuarios"), "operator": "=", "rightValue": 1}])
            )
