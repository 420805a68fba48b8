import pandas as pd

from .rows import RowSet

ROLE_COLUMN = "Zeilenart"


def rows_to_frame(row_set: RowSet) -> pd.DataFrame:
    """
    Flatten a row set for the on-screen preview. Cells covered by a spanning
    weekday cell come out as empty strings.
    """
    columns = list(row_set.headers)
    records = []
    for row in row_set.rows:
        values = [cell.content for cell in row.cells]
        values = [""] * (len(columns) - len(values)) + values
        record = dict(zip(columns, values))
        record[ROLE_COLUMN] = row.role.value
        records.append(record)
    return pd.DataFrame(records, columns=columns + [ROLE_COLUMN])
