from pathlib import Path

import pandas as pd

from minicel.interpreter import MinicelEngine
from minicel.sheet import Sheet


def evaluate_to_dataframe(source: str | Path | Sheet) -> pd.DataFrame:
    """Evaluate every formula of a sheet and return the result as a DataFrame.

    The (evaluated) header line provides the column names. Values are kept as
    text, exactly as they would be written to the output CSV. Rows shorter
    than the header are padded with None.
    """
    sheet = source if isinstance(source, Sheet) else Sheet.from_path(source)
    records = [record for _, record in MinicelEngine(sheet).evaluate_rows()]
    if not records:
        return pd.DataFrame()

    header, *rows = records
    width = max(len(record) for record in records)
    columns = list(header) + [f"column_{i}" for i in range(len(header), width)]
    rows = [list(row) + [None] * (width - len(row)) for row in rows]
    return pd.DataFrame(rows, columns=columns, dtype=object)
