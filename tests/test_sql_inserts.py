import pytest

from hshockey.sql_inserts import SqlInsertParser, coerce_value, parse_inserts, split_tuples


def test_parses_multiline_statement_into_column_dicts() -> None:
    sql = """-- dump header
INSERT INTO teams (id, name, gender) VALUES
(1, 'Catholic Memorial', 'M'),
(2, 'Arlington Catholic', NULL);
"""
    rows = parse_inserts(sql)
    assert rows == [
        {"id": 1, "name": "Catholic Memorial", "gender": "M"},
        {"id": 2, "name": "Arlington Catholic", "gender": None},
    ]


def test_coerces_literals() -> None:
    assert coerce_value("42", quoted=False) == 42
    assert coerce_value("-3", quoted=False) == -3
    assert coerce_value("0.905", quoted=False) == pytest.approx(0.905)
    assert coerce_value("NULL", quoted=False) is None
    assert coerce_value("TRUE", quoted=False) is True
    assert coerce_value("false", quoted=False) is False
    assert coerce_value("42", quoted=True) == "42"
    assert coerce_value("", quoted=True) == ""
    assert coerce_value("CURRENT_DATE", quoted=False) == "CURRENT_DATE"


def test_quoted_strings_keep_commas_parens_and_escapes() -> None:
    text = r'''(1, 'Smith, John (C)', "say ""hi""", 'St. John\'s', 'line\nbreak')'''
    values = next(split_tuples(text))
    assert values == [1, "Smith, John (C)", 'say "hi"', "St. John's", "line\nbreak"]


def test_double_quoted_and_single_quoted_values_both_accepted() -> None:
    rows = parse_inserts("INSERT INTO t (a, b) VALUES (\"x\", 'y');")
    assert rows == [{"a": "x", "b": "y"}]


def test_empty_trailing_value_is_null() -> None:
    values = next(split_tuples("(1, ,'')"))
    assert values == [1, None, ""]


def test_rows_with_wrong_arity_are_dropped_and_counted() -> None:
    parser = SqlInsertParser()
    rows = parser.parse("INSERT INTO t (a, b) VALUES (1, 2), (3), (4, 5, 6), (7, 8);")
    assert rows == [{"a": 1, "b": 2}, {"a": 7, "b": 8}]
    assert parser.rows_parsed == 2
    assert parser.rows_dropped == 2


def test_multiple_statements_and_table_filter() -> None:
    sql = """INSERT INTO `teams` (`id`, `name`) VALUES (1, 'A');
INSERT INTO games (id, home_score) VALUES (9, 3);
INSERT INTO teams (id, name) VALUES
(2, 'B');
"""
    parser = SqlInsertParser(table="teams")
    rows = parser.parse(sql)
    assert [r["name"] for r in rows] == ["A", "B"]
    assert parser.statements == 3
    assert parser.tables_seen == {"teams", "games"}


def test_comment_lines_inside_values_block_are_skipped() -> None:
    sql = """INSERT INTO t (a) VALUES
(1),
-- (2),
(3);
"""
    assert parse_inserts(sql) == [{"a": 1}, {"a": 3}]


@pytest.mark.regression
def test_unterminated_trailing_statement_keeps_complete_tuples() -> None:
    sql = "INSERT INTO t (a, b) VALUES\n(1, 'x'),\n(2, 'y'),\n(3, 'trunc"
    assert parse_inserts(sql) == [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]


@pytest.mark.regression
def test_second_statement_on_the_same_line_does_not_leak_into_the_first() -> None:
    sql = "INSERT INTO t (a) VALUES (1); INSERT INTO u (a) VALUES (2);\n"
    assert parse_inserts(sql, table="t") == [{"a": 1}]
    assert next(split_tuples("(1, 'a;b'); (2)")) == [1, "a;b"]
    assert list(split_tuples("(1); (2)")) == [[1]]


def test_text_without_insert_statements_yields_nothing() -> None:
    assert parse_inserts("CREATE TABLE t (a int);\n\n") == []
