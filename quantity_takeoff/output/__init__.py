# Report writers

from .csv_writer import write_records_to_csv, generate_csv_filename
from .json_writer import write_records_to_json, generate_json_filename

__all__ = [
    "write_records_to_csv",
    "generate_csv_filename",
    "write_records_to_json",
    "generate_json_filename",
]
