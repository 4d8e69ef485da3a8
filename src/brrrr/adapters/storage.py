# src/brrrr/adapters/storage.py
from pathlib import Path
from typing import Iterable

import pandas as pd

from brrrr.domain.ports import SavedDeal


def read_table(path: str | Path) -> pd.DataFrame:
    """CSV or parquet, chosen by extension."""
    path = str(path)
    if path.endswith(".parquet"):
        return pd.read_parquet(path)
    return pd.read_csv(path)


def write_table(df: pd.DataFrame, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.suffix == ".parquet":
        df.to_parquet(out, index=False)
    else:
        df.to_csv(out, index=False)
    return out


def deals_to_frame(deals: Iterable[SavedDeal]) -> pd.DataFrame:
    """
    One row per saved deal: id/name/notes/timestamps, then every input and
    result field as its own column (camelCase, results prefixed with 'result_'
    where a name would collide).
    """
    rows = []
    for d in deals:
        row = {
            "id": d["id"],
            "deal_name": d["deal_name"],
            "notes": d.get("notes") or "",
            "created_at": d["created_at"],
            "updated_at": d["updated_at"],
        }
        row.update(d["inputs"])
        for k, v in d["results"].items():
            row[f"result_{k}" if k in row else k] = v
        rows.append(row)
    return pd.DataFrame(rows)
