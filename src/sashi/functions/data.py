"""Tabular data helpers for workflows that shuffle rows between functions."""

import csv
import io
from typing import Any, Optional

from sashi.core.param_spec import ParamSpec, ParamType
from sashi.registry.types import FunctionDescriptor


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def parse_csv(csv_text: str, delimiter: Optional[str] = None) -> list[dict[str, Any]]:
    """Rows as dicts keyed by the header line; each row gets its 0-based ``_index``."""
    reader = csv.reader(io.StringIO(csv_text.strip()), delimiter=delimiter or ",")
    lines = [line for line in reader if line]
    if not lines:
        return []

    headers = [header.strip() for header in lines[0]]
    rows = []
    for index, values in enumerate(lines[1:]):
        row: dict[str, Any] = {
            header: (values[i].strip() if i < len(values) else "") for i, header in enumerate(headers)
        }
        row["_index"] = index
        rows.append(row)
    return rows


def to_csv(data: list[dict[str, Any]], columns: Optional[list[str]] = None) -> str:
    if not data:
        return ""
    keys = columns or list(data[0])
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(keys)
    for row in data:
        writer.writerow(["" if row.get(key) is None else row.get(key) for key in keys])
    return buffer.getvalue().rstrip("\n")


def map_data(data: list[dict[str, Any]], mapping: dict[str, str]) -> list[dict[str, Any]]:
    return [{new: item[old] for old, new in mapping.items() if old in item} for item in data]


def group_by(data: list[dict[str, Any]], field: str) -> dict[str, list[dict[str, Any]]]:
    groups: dict[str, list[dict[str, Any]]] = {}
    for item in data:
        key = item.get(field)
        groups.setdefault("undefined" if key in (None, "") else str(key), []).append(item)
    return groups


def aggregate(data: list[dict[str, Any]], field: Optional[str] = None) -> dict[str, Any]:
    """Count rows, or count/sum/avg/min/max the numeric values of ``field``."""
    if not field:
        return {"count": len(data), "operation": "count"}

    values = [number for number in (_as_number(item.get(field)) for item in data) if number is not None]
    if not values:
        return {"count": 0, "field": field}
    total = sum(values)
    return {
        "count": len(values),
        "sum": total,
        "avg": total / len(values),
        "min": min(values),
        "max": max(values),
        "field": field,
    }


def prepare_chart_data(data: list[dict[str, Any]], label_field: str, value_field: str) -> list[dict[str, Any]]:
    return [
        {"label": item[label_field], "value": _as_number(item.get(value_field)) or 0, "original": item}
        for item in data
        if item.get(label_field) is not None
    ]


def summarize_data(data: list[dict[str, Any]]) -> dict[str, Any]:
    if not data:
        return {"totalRecords": 0, "fields": [], "summary": "No data provided"}

    fields = list(data[0])
    field_types = {}
    for field in fields:
        values = [item.get(field) for item in data if item.get(field) is not None]
        numeric = all(_as_number(value) is not None for value in values)
        field_types[field] = {
            "type": "numeric" if values and numeric else "text",
            "uniqueValues": len({repr(value) for value in values}),
            "nullCount": len(data) - len(values),
        }
    return {
        "totalRecords": len(data),
        "fields": fields,
        "fieldTypes": field_types,
        "summary": f"Dataset with {len(data)} records and {len(fields)} fields",
    }


def _rows(description: str) -> ParamSpec:
    return ParamSpec(name="data", type=ParamType.ARRAY, description=description)


def descriptors() -> list[FunctionDescriptor]:
    return [
        FunctionDescriptor(
            name="parseCSV",
            description="Parse CSV text into structured array of objects",
            implementation=parse_csv,
            parameters=[
                ParamSpec(name="csvText", type=ParamType.STRING, description="CSV text to parse"),
                ParamSpec(
                    name="delimiter",
                    type=ParamType.STRING,
                    description="Column delimiter (default: comma)",
                    required=False,
                ),
            ],
            returns=ParamSpec(name="rows", type=ParamType.ARRAY),
        ),
        FunctionDescriptor(
            name="toCSV",
            description="Convert array of objects to CSV text",
            implementation=to_csv,
            parameters=[
                _rows("Array of objects to convert"),
                ParamSpec(
                    name="columns",
                    type=ParamType.ARRAY,
                    description="Specific columns to include (optional)",
                    required=False,
                    items=ParamSpec(name="column", type=ParamType.STRING),
                ),
            ],
            returns=ParamSpec(name="csv", type=ParamType.STRING),
        ),
        FunctionDescriptor(
            name="mapData",
            description="Transform each item in an array using field mappings",
            implementation=map_data,
            parameters=[
                _rows("Array to transform"),
                ParamSpec(name="mapping", type=ParamType.OBJECT, description="Field mapping object (oldField: newField)"),
            ],
        ),
        FunctionDescriptor(
            name="groupBy",
            description="Group array items by a specific field value",
            implementation=group_by,
            parameters=[
                _rows("Array to group"),
                ParamSpec(name="field", type=ParamType.STRING, description="Field name to group by"),
            ],
        ),
        FunctionDescriptor(
            name="aggregate",
            description="Calculate aggregate statistics (count, sum, avg, min, max) for numeric fields",
            implementation=aggregate,
            parameters=[
                _rows("Array to aggregate"),
                ParamSpec(
                    name="field", type=ParamType.STRING, description="Numeric field to aggregate", required=False
                ),
            ],
        ),
        FunctionDescriptor(
            name="prepareChartData",
            description="Transform data into chart-ready format with labels and values",
            implementation=prepare_chart_data,
            parameters=[
                _rows("Array of data objects"),
                ParamSpec(name="labelField", type=ParamType.STRING, description="Field to use as chart labels"),
                ParamSpec(name="valueField", type=ParamType.STRING, description="Field to use as chart values"),
            ],
        ),
        FunctionDescriptor(
            name="summarizeData",
            description="Create a summary overview of dataset with key statistics",
            implementation=summarize_data,
            parameters=[_rows("Array to summarize")],
        ),
    ]
