"""
Tests for user-facing driver error explanations.
"""
from schemaforge.database.errors import BatchPartialFailure, QueryError
from schemaforge.utils.error_messages import format_query_error, parse_query_error


class TestParseQueryError:
    """Tests for parse_query_error()"""

    def test_postgres_unknown_table(self):
        info = parse_query_error(Exception('relation "users" does not exist'), "postgres")
        assert info.title == "Unknown table"
        assert "'users'" in info.message

    def test_mysql_duplicate(self):
        info = parse_query_error(Exception("Duplicate entry '42' for key 'PRIMARY'"), "mysql")
        assert info.title == "Duplicate key"
        assert "'42'" in info.message

    def test_mssql_invalid_column(self):
        info = parse_query_error(Exception("Invalid column name 'emial'."), "mssql")
        assert info.title == "Unknown column"

    def test_generic_pattern(self):
        info = parse_query_error(Exception("Incorrect syntax near 'FORM'"), "mssql")
        assert info.title == "Syntax error"

    def test_unknown_dialect_tries_all_patterns(self):
        info = parse_query_error(Exception("Invalid object name 'dbo.x'"), None)
        assert info.title == "Unknown table"

    def test_no_match(self):
        info = parse_query_error(Exception("something odd"), "postgres")
        assert info.title == "Statement failed"
        assert info.original_error == "something odd"


class TestFormatQueryError:
    """Tests for format_query_error() and QueryError.describe()"""

    def test_includes_server_message(self):
        text = format_query_error(Exception('null value in column "email"'), "postgres")
        assert text.startswith("Missing value")
        assert "Suggestion:" in text
        assert text.endswith('Server message:\nnull value in column "email"')

    def test_without_original(self):
        text = format_query_error(Exception("timed out"), "mysql", include_original=False)
        assert "Server message" not in text

    def test_query_error_describe(self):
        cause = Exception("Table 'shop.users' doesn't exist")
        error = QueryError(str(cause), sql="SELECT 1", dialect="mysql", cause=cause)
        assert error.describe().startswith("Unknown table")

    def test_batch_failure_message(self):
        failure = BatchPartialFailure(0, 2, applied=[], remaining=["a", "b"],
                                      cause=QueryError("lock timeout"))
        assert str(failure) == "failed at operation 1 of 2: lock timeout"
