"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Unit tests for append_key_value() and ConnectionStringBuilder.
"""

import pytest
from conn_str.connection_string_builder import (
    ConnectionStringBuilder,
    append_key_value,
    quote_odbc_value_match,
    quote_value_match,
)
from conn_str.connection_string_parser import parse


class TestAppendKeyValueAdoNet:
    """Encoding with ADO.NET quoting rules."""

    def test_value_with_equal_is_quoted(self):
        assert append_key_value("", "a", "test=2") == 'a="test=2"'

    def test_documented_sequence(self):
        s = append_key_value("", "database", "MasterDb")
        s = append_key_value(s, "server", ".\\SQL2017")
        s = append_key_value(s, "user id", "me")
        s = append_key_value(s, "password", "pass=1")
        assert s == 'database=MasterDb;server=.\\SQL2017;user id=me;password="pass=1"'

    def test_separator_added_only_when_missing(self):
        assert append_key_value("a=1", "b", "2") == "a=1;b=2"
        assert append_key_value("a=1;", "b", "2") == "a=1;b=2"

    def test_safe_value_idempotent_with_or_without_separator(self):
        assert append_key_value("x=1", "a", "b") == append_key_value("x=1;", "a", "b")

    def test_key_equal_is_doubled(self):
        assert append_key_value("", "a=b", "1") == "a==b=1"

    def test_value_with_double_quote_uses_single_quotes(self):
        assert append_key_value("", "a", 'say "hi"') == "a='say \"hi\"'"

    def test_value_with_single_quote_uses_double_quotes(self):
        assert append_key_value("", "a", "it's") == 'a="it\'s"'

    def test_value_with_both_quotes_doubles_double_quotes(self):
        assert append_key_value("", "a", 'it\'s "x"') == 'a="it\'s ""x"""'

    def test_value_with_whitespace_is_quoted(self):
        assert append_key_value("", "application name", "My App") == 'application name="My App"'

    def test_value_with_semicolon_is_quoted(self):
        assert append_key_value("", "a", "x;y") == 'a="x;y"'

    def test_value_with_control_character_is_quoted(self):
        assert append_key_value("", "a", "x\ty") == 'a="x\ty"'

    def test_empty_value(self):
        assert append_key_value("", "a", "") == "a="

    def test_braces_need_no_quotes(self):
        assert append_key_value("", "driver", "{SQL}") == "driver={SQL}"


class TestAppendKeyValueOdbc:
    """Encoding with ODBC quoting rules."""

    def test_key_written_verbatim(self):
        assert append_key_value("", "a=b", "1", use_odbc_rules=True) == "a=b=1"

    def test_plain_value_verbatim(self):
        assert append_key_value("", "driver", "SQL Server", use_odbc_rules=True) == "driver=SQL Server"

    def test_value_with_semicolon_is_braced(self):
        assert append_key_value("", "pwd", "a;b", use_odbc_rules=True) == "pwd={a;b}"

    def test_right_brace_doubled_inside_braces(self):
        assert append_key_value("", "pwd", "p}w;d", use_odbc_rules=True) == "pwd={p}}w;d}"

    def test_leading_brace_is_braced(self):
        assert append_key_value("", "pwd", "{x", use_odbc_rules=True) == "pwd={{x}"

    def test_already_braced_value_verbatim(self):
        assert append_key_value("", "driver", "{SQL Server}", use_odbc_rules=True) == "driver={SQL Server}"

    def test_driver_word_is_braced(self):
        assert append_key_value("", "a", "driver", use_odbc_rules=True) == "a={driver}"
        assert append_key_value("", "a", "DRIVER", use_odbc_rules=True) == "a={DRIVER}"

    def test_right_brace_alone_verbatim(self):
        assert append_key_value("", "a", "x}", use_odbc_rules=True) == "a=x}"

    def test_empty_value(self):
        assert append_key_value("a=1", "b", "", use_odbc_rules=True) == "a=1;b="


class TestQuotePredicates:

    @pytest.mark.parametrize("value", ["", "MasterDb", ".\\SQL2017", "tcp:host,1433", "{x}"])
    def test_safe_values(self, value):
        assert quote_value_match(value)

    @pytest.mark.parametrize("value", ["a b", "a=b", "a;b", "a'b", 'a"b', "a\x00b", "a\u00a0b"])
    def test_unsafe_values(self, value):
        assert not quote_value_match(value)

    @pytest.mark.parametrize("value", ["{}", "{x}", "{a}}b}", "{a}}}", "{;}"])
    def test_braced_values(self, value):
        assert quote_odbc_value_match(value)

    @pytest.mark.parametrize("value", ["", "x", "{x", "x}", "{a}b}", "{x}y"])
    def test_not_braced_values(self, value):
        assert not quote_odbc_value_match(value)


class TestRoundTrip:
    """Values encoded by append_key_value() parse back unchanged."""

    @pytest.mark.parametrize("value", [
        "MasterDb",
        "test=2",
        'say "hi"',
        'it\'s "x"',
        "x'",
        "a;b",
        " padded ",
        "",
    ])
    def test_ado_net(self, value):
        assert parse(append_key_value("", "k", value)) == {'k': value}

    @pytest.mark.parametrize("value", ["SQL Server", "a;b", "p}w;d", "{x", "driver", "x}", ""])
    def test_odbc(self, value):
        encoded = append_key_value("", "k", value, use_odbc_rules=True)
        assert parse(encoded, use_odbc_rules=True) == {'k': value}

    def test_key_with_equal(self):
        assert parse(append_key_value("", "a=b", "1")) == {'a=b': '1'}

    def test_many_pairs(self):
        s = ""
        params = {'data source': '.\\SQL2017', 'password': 'pa;ss=1', 'application name': 'My "App"'}
        for key, value in params.items():
            s = append_key_value(s, key, value)
        assert parse(s) == params


class TestConnectionStringBuilder:

    def test_builds_in_place(self):
        builder = ConnectionStringBuilder()
        builder.append_key_value("database", "MasterDb").append_key_value("password", "pass=1")
        assert builder.build() == 'database=MasterDb;password="pass=1"'
        assert str(builder) == builder.build()
        assert len(builder) == len(builder.build())

    def test_empty_builder(self):
        builder = ConnectionStringBuilder()
        assert builder.build() == ""
        assert not builder

    def test_initial_text(self):
        builder = ConnectionStringBuilder(initial="server=.")
        builder.append_key_value("database", "db")
        assert builder.build() == "server=.;database=db"

    def test_extend_odbc(self):
        builder = ConnectionStringBuilder(use_odbc_rules=True)
        builder.extend({'driver': 'ODBC Driver 18 for SQL Server', 'pwd': 'a;b'})
        assert builder.build() == "driver=ODBC Driver 18 for SQL Server;pwd={a;b}"

    def test_non_string_value(self):
        assert ConnectionStringBuilder().append_key_value("packet size", 4096).build() == "packet size=4096"

    def test_repr(self):
        assert repr(ConnectionStringBuilder(use_odbc_rules=True)) == "<ConnectionStringBuilder dialect=odbc length=0>"
