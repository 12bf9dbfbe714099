"""PEACH record parsing"""
from .peach_parser import (
    PeachRecordParser,
    compare_process_events,
    get_record_events,
    generate_status,
    pies_event_to_date,
    pies_event_to_date_parts,
    summarize_record,
    parse_peach_records,
)
from .status_tables import StatusTables, DEFAULT_TABLES

__all__ = [
    "PeachRecordParser",
    "compare_process_events",
    "get_record_events",
    "generate_status",
    "pies_event_to_date",
    "pies_event_to_date_parts",
    "summarize_record",
    "parse_peach_records",
    "StatusTables",
    "DEFAULT_TABLES",
]
