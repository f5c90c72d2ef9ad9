import pytest
from loguru import logger

from studyjam.parsing.columns import MAIN_EMAIL_HEADER, MAIN_REQUIRED_HEADERS
from studyjam.parsing.csv_parser import ParseError, parse_csv, require_headers


def test_header_names_are_trimmed():
    parsed = parse_csv(" User Email ,User Name  \na@x.com,A\n", "main.csv")
    assert parsed.headers == ["User Email", "User Name"]
    assert parsed.records == [{"User Email": "a@x.com", "User Name": "A"}]


def test_blank_lines_are_skipped():
    text = "a,b\n\n1,2\n,\n   \n3,4\n"
    parsed = parse_csv(text, "blank.csv")
    assert [r["a"] for r in parsed.records] == ["1", "3"]
    assert parsed.warnings == []


def test_malformed_rows_are_warnings_not_errors():
    parsed = parse_csv("a,b\n1,2,3\n4\n", "ragged.csv")
    assert parsed.records == [{"a": "1", "b": "2"}, {"a": "4", "b": ""}]
    assert len(parsed.warnings) == 2
    assert "ragged.csv" in parsed.warnings[0]


def test_byte_order_mark_is_dropped():
    parsed = parse_csv("\ufeffUser Email,User Name\na@x.com,A\n", "bom.csv")
    assert parsed.headers[0] == "User Email"


def test_quoted_fields_keep_commas():
    parsed = parse_csv('name,team\n"Doe, Jane","RIO (Cloud)"\n', "quoted.csv")
    assert parsed.records[0] == {"name": "Doe, Jane", "team": "RIO (Cloud)"}


def test_missing_header_names_expected_and_found():
    headers = [h for h in MAIN_REQUIRED_HEADERS if h != MAIN_EMAIL_HEADER]
    text = ",".join(f'"{h}"' for h in headers) + "\n" + ",".join("1" for _ in headers) + "\n"
    parsed = parse_csv(text, "leaderboard-data.csv")

    with pytest.raises(ParseError) as excinfo:
        require_headers(parsed, MAIN_REQUIRED_HEADERS)

    error = excinfo.value
    assert error.resource == "leaderboard-data.csv"
    assert error.missing == [MAIN_EMAIL_HEADER]
    assert error.expected == MAIN_REQUIRED_HEADERS
    assert error.found == headers
    assert "Missing required headers in leaderboard-data.csv: User Email." in str(error)
    assert "Found: [User Name" in str(error)


def test_empty_file_passes_header_check():
    parsed = parse_csv("", "empty.csv")
    assert parsed.records == []
    require_headers(parsed, MAIN_REQUIRED_HEADERS)


def test_header_only_file_logs_missing_headers():
    parsed = parse_csv("Name,Team\n", "roster.csv")
    messages = []
    handler_id = logger.add(messages.append, format="{message}", level="WARNING")
    try:
        require_headers(parsed, [MAIN_EMAIL_HEADER])
    finally:
        logger.remove(handler_id)
    assert parsed.records == []
    assert any(
        f"missing: {MAIN_EMAIL_HEADER}" in m and "Found: [Name, Team]" in m for m in messages
    )
