"""Tests for the filter parser."""

import pytest
from datetime import date

from ledgerkit.database.filters import FilterParser, PredicateKind, escape_like, is_present
from ledgerkit.domain.errors import MissingParameters, UnsupportedFilterOperator, ValidationError

BASE = "SELECT * FROM inventory"


def _values_by_placeholder(sql, params):
    """Pair the SQL leading up to every placeholder with the parameter bound there."""
    fragments = sql.split("?")
    assert len(fragments) - 1 == len(params)
    return [(fragment.rstrip(), value) for fragment, value in zip(fragments, params)]


def _assert_aligned(sql, params, expected):
    """Check each placeholder follows the expected SQL and binds the expected value."""
    pairs = _values_by_placeholder(sql, params)
    assert len(pairs) == len(expected)
    for (fragment, value), (tail, expected_value) in zip(pairs, expected):
        assert fragment.endswith(tail), f"{fragment!r} does not end with {tail!r}"
        assert value == expected_value


class TestEquals:
    """Tests for equality filters."""

    def test_equals_adds_clause_and_parameter(self):
        """Test that a present value becomes alias.field = ?."""
        parser = FilterParser({"code": "A100"}, table_alias="inventory", auto_parse_statements=False)
        parser.equals("code")

        assert parser.apply_query(BASE) == f"{BASE} WHERE inventory.code = ?"
        assert parser.parameters() == ["A100"]

    def test_absent_value_changes_nothing(self):
        """Test that equals on an absent filter equals not calling it at all."""
        with_call = FilterParser({"label": "x"}, table_alias="inventory", auto_parse_statements=False)
        with_call.equals("code")
        with_call.full_text("label")

        without_call = FilterParser({"label": "x"}, table_alias="inventory", auto_parse_statements=False)
        without_call.full_text("label")

        assert with_call.apply_query(BASE) == without_call.apply_query(BASE)
        assert with_call.parameters() == without_call.parameters()

    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty_values_are_absent(self, value):
        """Test that None, empty string and empty list add no clause."""
        parser = FilterParser({"code": value}, table_alias="inventory", auto_parse_statements=False)
        parser.equals("code")

        assert parser.apply_query(BASE) == BASE
        assert parser.parameters() == []

    @pytest.mark.parametrize("value", [0, False])
    def test_falsy_values_are_present(self, value):
        """Test that zero and False are real filter values."""
        parser = FilterParser({"locked": value}, table_alias="inventory", auto_parse_statements=False)
        parser.equals("locked")

        assert parser.apply_query(BASE) == f"{BASE} WHERE inventory.locked = ?"
        assert parser.parameters() == [value]

    def test_equals_with_column_and_alias(self):
        """Test overriding the column name and table alias."""
        parser = FilterParser({"label": "Tablet"}, table_alias="inventory", auto_parse_statements=False)
        parser.equals("label", "text", "iu")

        assert parser.apply_query(BASE) == f"{BASE} WHERE iu.text = ?"

    def test_equals_with_list_uses_in(self):
        """Test that a list value expands to one placeholder per element."""
        parser = FilterParser({"type_id": [1, 2, 3]}, table_alias="inventory", auto_parse_statements=False)
        parser.equals("type_id")

        assert parser.apply_query(BASE) == f"{BASE} WHERE inventory.type_id IN (?, ?, ?)"
        assert parser.parameters() == [1, 2, 3]

    def test_invalid_column_name_is_rejected(self):
        """Test that column names must be plain identifiers."""
        parser = FilterParser({"code; DROP TABLE inventory": "x"}, auto_parse_statements=False)
        with pytest.raises(ValueError):
            parser.equals("code; DROP TABLE inventory")


class TestFullText:
    """Tests for substring filters."""

    def test_full_text_binds_lowercase_pattern(self):
        """Test that the value is bound with surrounding wildcards."""
        parser = FilterParser({"text": "Para"}, auto_parse_statements=False)
        parser.full_text("text", "text", "inventory")

        assert parser.apply_query(BASE) == (
            f"{BASE} WHERE LOWER(inventory.text) LIKE ? ESCAPE '\\'"
        )
        assert parser.parameters() == ["%para%"]

    def test_wildcards_in_value_are_escaped(self):
        """Test that client-supplied wildcards only match literally."""
        parser = FilterParser({"text": "50%_off\\"}, auto_parse_statements=False)
        parser.full_text("text")

        assert parser.parameters() == ["%50\\%\\_off\\\\%"]

    def test_value_never_appears_in_sql(self):
        """Test that the raw value is bound, not interpolated."""
        value = "' OR 1=1 --"
        parser = FilterParser({"text": value}, auto_parse_statements=False)
        parser.full_text("text")

        assert value not in parser.apply_query(BASE)

    def test_escape_like(self):
        assert escape_like("a%b_c\\d") == "a\\%b\\_c\\\\d"


class TestCustom:
    """Tests for custom clause templates."""

    def test_custom_binds_value(self):
        """Test that the template is used verbatim and the value bound."""
        parser = FilterParser({}, auto_parse_statements=False)
        parser.custom("min_price", "inventory.price >= ?", 10)

        assert parser.apply_query(BASE) == f"{BASE} WHERE inventory.price >= ?"
        assert parser.parameters() == [10]

    def test_custom_defaults_to_filter_value(self):
        """Test that the filter's own value is used when none is passed."""
        parser = FilterParser({"min_price": 5}, auto_parse_statements=False)
        parser.custom("min_price", "inventory.price >= ?")

        assert parser.parameters() == [5]

    def test_custom_expands_list(self):
        """Test set membership over a list of identifiers."""
        ids = [b"\x01" * 16, b"\x02" * 16]
        parser = FilterParser({"inventory_uuids": ids}, auto_parse_statements=False)
        parser.custom("inventory_uuids", "inventory.uuid IN (?)")

        assert parser.apply_query(BASE) == f"{BASE} WHERE inventory.uuid IN (?, ?)"
        assert parser.parameters() == ids

    def test_custom_with_empty_list_adds_nothing(self):
        parser = FilterParser({"inventory_uuids": []}, auto_parse_statements=False)
        parser.custom("inventory_uuids", "inventory.uuid IN (?)")

        assert parser.apply_query(BASE) == BASE

    def test_custom_requires_one_placeholder(self):
        """Test that templates without exactly one placeholder are refused."""
        parser = FilterParser({}, auto_parse_statements=False)
        with pytest.raises(ValueError):
            parser.custom("x", "inventory.price > 1", 1)
        with pytest.raises(ValueError):
            parser.custom("x", "inventory.price BETWEEN ? AND ?", 1)


class TestOrdering:
    """Tests for placeholder and parameter alignment."""

    def test_clauses_follow_call_order(self):
        """Test interleaved calls keep placeholders aligned with parameters."""
        filters = {"code": "A100", "text": "para", "group_uuid": b"\x07" * 16, "limit": 5}
        parser = FilterParser(filters, table_alias="inventory", auto_parse_statements=False)

        parser.equals("code")
        parser.set_order("ORDER BY inventory.code ASC")
        parser.full_text("text")
        parser.custom("min_price", "inventory.price >= ?", 2)
        parser.limit("limit")
        parser.equals("group_uuid")

        sql = parser.apply_query(BASE)
        assert sql == (
            f"{BASE} WHERE inventory.code = ? AND LOWER(inventory.text) LIKE ? ESCAPE '\\' "
            "AND inventory.price >= ? AND inventory.group_uuid = ? "
            "ORDER BY inventory.code ASC LIMIT ?"
        )
        _assert_aligned(sql, parser.parameters(), [
            ("inventory.code =", "A100"),
            ("LIKE", "%para%"),
            ("inventory.price >=", 2),
            ("inventory.group_uuid =", b"\x07" * 16),
            ("LIMIT", 5),
        ])

    def test_list_values_stay_aligned(self):
        """Test that expanded IN lists keep later placeholders aligned."""
        first, second, third = b"\x01" * 16, b"\x02" * 16, b"\x03" * 16
        filters = {"code": ["A100", "B200"], "inventory_uuids": [first, second, third], "type_id": 3}
        parser = FilterParser(filters, table_alias="inventory", auto_parse_statements=False)

        parser.equals("code")
        parser.custom("inventory_uuids", "inventory.uuid IN (SELECT uuid FROM inventory WHERE uuid IN (?))")
        parser.equals("type_id")
        parser.set_order("ORDER BY inventory.code")

        _assert_aligned(parser.apply_query(BASE), parser.parameters(), [
            ("inventory.code IN (", "A100"),
            (",", "B200"),
            ("WHERE uuid IN (", first),
            (",", second),
            (",", third),
            ("inventory.type_id =", 3),
        ])

    def test_auto_parsed_values_stay_aligned(self):
        filters = {"reference": "R1", "amount": ">=100", "user_id": [1, 2]}
        parser = FilterParser(filters, table_alias="v")

        parser.equals("reference")
        parser.set_order("ORDER BY v.date DESC")

        _assert_aligned(parser.apply_query("SELECT * FROM voucher v"), parser.parameters(), [
            ("v.reference =", "R1"),
            ("v.amount >=", "100"),
            ("v.user_id IN (", 1),
            (",", 2),
        ])

    def test_predicates_are_tagged(self):
        """Test that each predicate records its kind."""
        parser = FilterParser({"code": "A"}, auto_parse_statements=False)
        parser.equals("code").set_order("ORDER BY code")

        kinds = [p.kind for p in parser.predicates]
        assert kinds == [PredicateKind.EQUALS, PredicateKind.ORDER]

    def test_no_conditions_no_where(self):
        """Test that only trailing clauses are added when nothing matched."""
        parser = FilterParser({}, auto_parse_statements=False)
        parser.equals("code").set_order("ORDER BY code")

        assert parser.apply_query(BASE + ";") == f"{BASE} ORDER BY code"
        assert parser.parameters() == []

    def test_group_comes_before_order(self):
        parser = FilterParser({}, auto_parse_statements=False)
        parser.set_order("ORDER BY total").set_group("GROUP BY account_id")

        assert parser.apply_query(BASE) == f"{BASE} GROUP BY account_id ORDER BY total"


class TestDateRange:
    """Tests for date range filters."""

    def test_both_dates(self):
        parser = FilterParser({"date_from": "2024-01-01", "date_to": "2024-01-31"}, table_alias="v")
        parser.date_range()

        assert parser.apply_query("SELECT 1") == (
            "SELECT 1 WHERE DATE(v.date) >= DATE(?) AND DATE(v.date) <= DATE(?)"
        )
        assert parser.parameters() == [date(2024, 1, 1), date(2024, 1, 31)]

    def test_one_date_is_rejected(self):
        """Test that a range with only one end fails."""
        parser = FilterParser({"date_from": "2024-01-01"})
        with pytest.raises(MissingParameters, match="both a start and end date") as exc_info:
            parser.date_range()
        assert exc_info.value.code == "ERR_MISSING_PARAMETERS"

    def test_bad_date_is_rejected(self):
        parser = FilterParser({"date_from": "soon", "date_to": "later"})
        with pytest.raises(ValidationError):
            parser.date_range()


class TestLimit:
    """Tests for row limits."""

    @pytest.mark.parametrize("value", [0, -1, "abc", True])
    def test_invalid_limit(self, value):
        parser = FilterParser({"limit": value}, auto_parse_statements=False)
        with pytest.raises(ValidationError):
            parser.limit()

    def test_limit_from_string(self):
        parser = FilterParser({"limit": "10"}, auto_parse_statements=False)
        parser.limit()

        assert parser.apply_query(BASE) == f"{BASE} LIMIT ?"
        assert parser.parameters() == [10]


class TestAutoParse:
    """Tests for automatic parsing of remaining filters."""

    def test_remaining_filters_become_comparisons(self):
        """Test that unconsumed filters are compared after explicit ones."""
        parser = FilterParser({"amount": ">=100", "reference": "REF-1", "code": "A"}, table_alias="v")
        parser.equals("code")

        sql = parser.apply_query("SELECT 1")
        assert sql == "SELECT 1 WHERE v.code = ? AND v.amount >= ? AND v.reference = ?"
        assert parser.parameters() == ["A", "100", "REF-1"]

    @pytest.mark.parametrize(
        "value,operator,operand",
        [
            ("=5", "=", "5"),
            ("!=5", "!=", "5"),
            ("<>5", "!=", "5"),
            (">5", ">", "5"),
            ("<= 5", "<=", "5"),
            ("<5", "<", "5"),
        ],
    )
    def test_supported_operators(self, value, operator, operand):
        parser = FilterParser({"amount": value})

        assert parser.apply_query("SELECT 1") == f"SELECT 1 WHERE amount {operator} ?"
        assert parser.parameters() == [operand]

    @pytest.mark.parametrize("value", ["=>5", "!5", "<<5", "==5", "><5"])
    def test_unsupported_operator(self, value):
        """Test that unknown operator prefixes fail."""
        parser = FilterParser({"amount": value})
        with pytest.raises(UnsupportedFilterOperator):
            parser.apply_query("SELECT 1")

    def test_operator_without_operand(self):
        parser = FilterParser({"amount": ">="})
        with pytest.raises(ValidationError):
            parser.apply_query("SELECT 1")

    def test_disabled_auto_parse_ignores_operators(self):
        """Test that values are plain equality inputs when auto parse is off."""
        parser = FilterParser({"code": ">=A", "other": "=>x"}, auto_parse_statements=False)
        parser.equals("code")

        assert parser.apply_query(BASE) == f"{BASE} WHERE code = ?"
        assert parser.parameters() == [">=A"]

    def test_unknown_column_is_rejected(self):
        """Test that an allow-list of columns restricts auto-parsed filters."""
        parser = FilterParser({"password": "x"}, columns=["amount"])
        with pytest.raises(ValidationError, match="Unknown filter"):
            parser.apply_query("SELECT 1")

    def test_non_identifier_key_is_rejected(self):
        parser = FilterParser({"amount) OR (1": "1"})
        with pytest.raises(ValidationError):
            parser.apply_query("SELECT 1")

    def test_apply_twice_is_stable(self):
        """Test that repeated calls do not add auto predicates twice."""
        parser = FilterParser({"amount": "<5"})
        first = parser.apply_query("SELECT 1")

        assert parser.apply_query("SELECT 1") == first
        assert parser.parameters() == ["5"]


def test_is_present():
    assert is_present(0)
    assert is_present(False)
    assert is_present("0")
    assert not is_present(None)
    assert not is_present("")
    assert not is_present([])
