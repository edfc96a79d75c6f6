from .records import (
    INPUT_COLUMNS,
    OUTPUT_COLUMNS,
    InputRow,
    ParsedRow,
    RecordFormatError,
    iter_records,
    write_statements,
)

__all__ = [
    "INPUT_COLUMNS",
    "OUTPUT_COLUMNS",
    "InputRow",
    "ParsedRow",
    "RecordFormatError",
    "iter_records",
    "write_statements",
]
