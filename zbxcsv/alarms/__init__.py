"""Alarm table pipeline — index, assemble, sort, serialize."""

from zbxcsv.alarms.assembler import assemble_rows, resolve_suppressed
from zbxcsv.alarms.index import ProblemIndex, build_ack_set, build_problem_index
from zbxcsv.alarms.pipeline import AlarmPipeline, AlarmTable
from zbxcsv.alarms.serializer import is_error_table, parse_table, render_error, render_rows
from zbxcsv.alarms.sorter import row_sort_key, sort_rows

__all__ = [
    "AlarmPipeline",
    "AlarmTable",
    "ProblemIndex",
    "assemble_rows",
    "build_ack_set",
    "build_problem_index",
    "is_error_table",
    "parse_table",
    "render_error",
    "render_rows",
    "resolve_suppressed",
    "row_sort_key",
    "sort_rows",
]
