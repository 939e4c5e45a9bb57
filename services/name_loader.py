import csv
from typing import List

def load_names(filename: str) -> List[str]:
    """
    Reads the `name` column of a headered CSV file.
    A missing or unreadable file yields an empty list.
    """
    names = []
    try:
        with open(filename, newline="", encoding="utf-8") as handle:
            for row in csv.DictReader(handle):
                name = (row.get("name") or "").strip()
                if name:
                    names.append(name)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        print(f"⚠️ Could not load CSV file {filename}: {e}")
        return []
    return names
