#!/usr/bin/env python3
"""Validate registration collection YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from registry import FetchError, Registration, YamlStore, parse_date
from registry.config import load_settings


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def check_dates(records: list) -> list[str]:
    """Warnings for records whose dates the list view cannot read."""
    warnings = []
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            continue
        reg = Registration.from_dict(record)
        for field, value in (("testingDate", reg.testing_date), ("expiringDate", reg.expiring_date)):
            if value is not None and parse_date(value) is None:
                warnings.append(f"records.{i}.{field}: unreadable date '{value}'")
    return warnings


def validate_collection(store: YamlStore, collection: str, schema: dict) -> list[str]:
    """Validate one collection of the store. Returns list of errors."""
    errors = []
    try:
        data = store.read(collection)
        validate(instance=data, schema=schema)
    except FetchError as e:
        errors.append(f"Read error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    else:
        errors.extend(check_dates(data["records"]))
    return errors


def main(data_dir=None):
    """Validate every collection file in the data directory."""
    schema = load_schema()
    data_dir = Path(data_dir) if data_dir else load_settings().data_dir

    if not data_dir.exists():
        print(f"Error: data directory not found: {data_dir}")
        return 1

    store = YamlStore(data_dir)
    collections = store.collections()

    if not collections:
        print(f"Warning: No YAML files found in {data_dir}")
        return 0

    all_valid = True
    for collection in collections:
        filename = store.collection_path(collection).name
        errors = validate_collection(store, collection, schema)
        if errors:
            print(f"FAIL: {filename}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filename}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
