"""
CSV tokenizer with support for quoted fields, escaped quotes and newlines inside quotes.

Parsing happens in two phases:
1. split_csv_lines() splits the content into logical lines. A newline inside
   a quoted field does not end the line.
2. parse_csv_line() splits one logical line into fields on unquoted commas.

Problems are collected in an error list instead of aborting the parse, so a
spreadsheet with one broken row still yields the other rows.

Example input:
```
Title,Notes
Design,"Wireframes, mockups"
Review,"The ""final"" check
spans two lines"
```
"""
from dataclasses import dataclass, field
from typing import Optional

BOM = "\ufeff"

ERROR_EMPTY_CONTENT = "Empty CSV content"
ERROR_NO_ROWS = "No valid rows found"
ERROR_UNCLOSED_QUOTE = "Unclosed quote"

@dataclass
class CSVParseResult:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

@dataclass
class CSVLineResult:
    fields: list[str]
    error: Optional[str] = None

def split_csv_lines(content: str) -> list[str]:
    """
    Split CSV content into logical lines.

    Quotes are kept in the returned lines, so they can be parsed by parse_csv_line().
    Unquoted LF, CRLF and CR end a line.
    """
    lines: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(content)

    while i < n:
        char = content[i]
        if char == '"':
            if in_quotes and i + 1 < n and content[i + 1] == '"':
                # Escaped quote, stays inside the quoted field.
                current.append('""')
                i += 2
                continue
            in_quotes = not in_quotes
            current.append(char)
        elif char == '\n' and not in_quotes:
            lines.append(''.join(current))
            current = []
        elif char == '\r' and not in_quotes:
            if i + 1 < n and content[i + 1] == '\n':
                i += 1
            lines.append(''.join(current))
            current = []
        else:
            current.append(char)
        i += 1

    if current:
        lines.append(''.join(current))

    return lines

def _finish_field(chars: list[tuple[str, bool]]) -> str:
    """
    Join the characters of a field. Whitespace is trimmed at the field
    boundaries, but only when it was outside of quotes.
    """
    start = 0
    end = len(chars)
    while start < end and not chars[start][1] and chars[start][0].isspace():
        start += 1
    while end > start and not chars[end - 1][1] and chars[end - 1][0].isspace():
        end -= 1
    return ''.join(char for char, _ in chars[start:end])

def parse_csv_line(line: str) -> CSVLineResult:
    """Split a logical line into fields. A missing closing quote is reported as an error."""
    fields: list[str] = []
    # Each character is paired with whether it was inside quotes.
    current: list[tuple[str, bool]] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        char = line[i]
        if not in_quotes:
            if char == '"':
                in_quotes = True
            elif char == ',':
                fields.append(_finish_field(current))
                current = []
            else:
                current.append((char, False))
            i += 1
            continue

        if char == '"':
            if i + 1 < n and line[i + 1] == '"':
                current.append(('"', True))
                i += 2
                continue
            in_quotes = False
        else:
            current.append((char, True))
        i += 1

    fields.append(_finish_field(current))

    if in_quotes:
        return CSVLineResult(fields=fields, error=ERROR_UNCLOSED_QUOTE)
    return CSVLineResult(fields=fields)

def parse_csv(content: str) -> CSVParseResult:
    """
    Parse CSV content into a header row and data rows.

    Empty content, or content without any rows, is rejected with an error and no headers.
    Rows whose length differs from the header row are kept, and reported in the errors.
    """
    if content.startswith(BOM):
        content = content[len(BOM):]

    if not content.strip():
        return CSVParseResult(errors=[ERROR_EMPTY_CONTENT])

    errors: list[str] = []
    rows: list[list[str]] = []

    for line_index, line in enumerate(split_csv_lines(content)):
        if not line.strip():
            continue
        result = parse_csv_line(line)
        if result.error:
            errors.append(f"Line {line_index + 1}: {result.error}")
        if result.fields:
            rows.append(result.fields)

    if not rows:
        return CSVParseResult(errors=[ERROR_NO_ROWS])

    headers = rows[0]
    data_rows = rows[1:]

    for row_index, row in enumerate(data_rows):
        if len(row) != len(headers):
            errors.append(f"Row {row_index + 2}: Expected {len(headers)} columns, got {len(row)}")

    return CSVParseResult(headers=headers, rows=data_rows, errors=errors)

def escape_csv_value(value: str) -> str:
    """Quote the value if it contains a comma, quote or newline. Inner quotes are doubled."""
    if any(char in value for char in (',', '"', '\n', '\r')):
        return '"' + value.replace('"', '""') + '"'
    return value
