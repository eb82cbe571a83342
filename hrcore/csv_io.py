from __future__ import annotations

import json
import re
from typing import Dict, Iterable, List, Optional

import pandas as pd

from hrcore.models import Collaborator, HRRecord

COLLABORATOR_CSV_COLUMNS = [
    "id", "name", "dni", "legajo", "cuil", "position", "ug", "status", "hireDate",
    "contractType", "category", "cct", "service", "turn", "observations",
]
RECORD_CSV_COLUMNS = ["id", "date", "collaboratorId", "ug", "position", "type", "details", "cost", "observations"]

CsvRow = Dict[str, str]

_LINE_BREAK = re.compile(r"\r?\n")

# Tokenizer states
_FIELD_START = 0
_UNQUOTED = 1
_QUOTED = 2
_QUOTE_IN_QUOTED = 3


class CsvFormatError(ValueError):
    def __init__(self, message: str, line_number: int) -> None:
        super().__init__(message)
        self.line_number = line_number


def _scan(chunk: str, state: int, tokens: List[str], buf: List[str]) -> int:
    """Feed ``chunk`` through the tokenizer, returning the state it ends in."""
    for ch in chunk:
        if state == _FIELD_START:
            if ch == '"':
                state = _QUOTED
            elif ch == ",":
                tokens.append("")
            elif ch.isspace():
                continue
            else:
                buf.append(ch)
                state = _UNQUOTED
        elif state == _UNQUOTED:
            if ch == ",":
                tokens.append("".join(buf).strip())
                buf.clear()
                state = _FIELD_START
            else:
                buf.append(ch)
        elif state == _QUOTED:
            if ch == '"':
                state = _QUOTE_IN_QUOTED
            else:
                buf.append(ch)
        else:
            if ch == '"':
                buf.append('"')
                state = _QUOTED
            elif ch == ",":
                tokens.append("".join(buf))
                buf.clear()
                state = _FIELD_START
            elif not ch.isspace():
                # Stray text after a closing quote stays part of the field.
                buf.append(ch)
    return state


def _finish(state: int, tokens: List[str], buf: List[str], line_number: int) -> List[str]:
    if state == _QUOTED:
        raise CsvFormatError(f"Línea {line_number}: comillas sin cerrar.", line_number)
    if state == _UNQUOTED:
        tokens.append("".join(buf).strip())
    elif state == _QUOTE_IN_QUOTED:
        tokens.append("".join(buf))
    else:
        tokens.append("")
    return tokens


def tokenize_line(line: str, line_number: int = 0) -> List[str]:
    """Split one CSV line into fields.

    Quoted fields may hold commas; ``""`` inside quotes is a literal quote.
    Unquoted fields are trimmed, quoted ones are kept verbatim.
    """
    tokens: List[str] = []
    buf: List[str] = []
    state = _scan(line, _FIELD_START, tokens, buf)
    return _finish(state, tokens, buf, line_number)


def parse_csv(text: str) -> List[CsvRow]:
    """Parse CSV text into one header-keyed mapping per data record.

    Header tokens are split on commas and trimmed. A quoted field may span
    several physical lines; line breaks inside it are kept as ``\\n``.
    Missing trailing values map to "" and surplus values are dropped. Text
    without data lines yields [].
    """
    lines = _LINE_BREAK.split(text.lstrip("\ufeff").strip())
    if len(lines) < 2:
        return []
    header = [h.strip() for h in lines[0].split(",")]

    rows: List[CsvRow] = []
    tokens: List[str] = []
    buf: List[str] = []
    state = _FIELD_START
    start_line = 2
    for line_number, line in enumerate(lines[1:], start=2):
        if state == _QUOTED:
            buf.append("\n")
        else:
            start_line = line_number
        state = _scan(line, state, tokens, buf)
        if state == _QUOTED:
            continue
        values = _finish(state, tokens, buf, start_line)
        rows.append({key: values[idx] if idx < len(values) else "" for idx, key in enumerate(header)})
        tokens, buf, state = [], [], _FIELD_START
    if state == _QUOTED:
        raise CsvFormatError(f"Línea {start_line}: comillas sin cerrar.", start_line)
    return rows


# ---------------- Export ----------------
def _select(items: Iterable, ids: Optional[Iterable[str]]) -> list:
    items = list(items)
    if not ids:
        return items
    wanted = set(ids)
    return [item for item in items if item.id in wanted]


def collaborators_to_frame(collaborators: Iterable[Collaborator]) -> pd.DataFrame:
    rows = [c.to_dict() for c in collaborators]
    return pd.DataFrame(rows, columns=COLLABORATOR_CSV_COLUMNS)


def records_to_frame(records: Iterable[HRRecord]) -> pd.DataFrame:
    rows = []
    for r in records:
        row = r.to_dict()
        row["details"] = json.dumps(row["details"], ensure_ascii=False)
        rows.append(row)
    return pd.DataFrame(rows, columns=RECORD_CSV_COLUMNS)


def export_collaborators_csv(collaborators: Iterable[Collaborator], ids: Optional[Iterable[str]] = None) -> str:
    return collaborators_to_frame(_select(collaborators, ids)).to_csv(index=False, lineterminator="\n")


def export_records_csv(records: Iterable[HRRecord], ids: Optional[Iterable[str]] = None) -> str:
    return records_to_frame(_select(records, ids)).to_csv(index=False, lineterminator="\n")
