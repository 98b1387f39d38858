from __future__ import annotations

from typing import List


def tokenize_csv(content: str) -> List[List[str]]:
    """Split CSV text into rows of raw field strings.

    Handles double-quoted fields (including embedded commas and line breaks),
    ``""`` as an escaped quote, and ``\\n``, ``\\r\\n`` or a bare ``\\r`` as
    row terminators. Blank rows at the end of the input are dropped and empty
    input yields no rows.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    value: List[str] = []
    in_quotes = False
    i = 0
    length = len(content)
    while i < length:
        char = content[i]
        if char == '"':
            if in_quotes and i + 1 < length and content[i + 1] == '"':
                value.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue
        if not in_quotes and char == ",":
            row.append("".join(value))
            value = []
            i += 1
            continue
        if not in_quotes and char in ("\n", "\r"):
            if char == "\r" and i + 1 < length and content[i + 1] == "\n":
                i += 1
            row.append("".join(value))
            rows.append(row)
            row = []
            value = []
            i += 1
            continue
        value.append(char)
        i += 1

    row.append("".join(value))
    rows.append(row)
    while rows and not any(rows[-1]):
        rows.pop()
    return rows
