from Schemas.dataset import Dataset


def make_dataset(**columns) -> Dataset:
    """Column-wise construction: make_dataset(score=[...], group=[...])."""
    names = list(columns)
    n_rows = len(next(iter(columns.values()))) if columns else 0
    records = [{name: columns[name][i] for name in names} for i in range(n_rows)]
    return Dataset(column_names=names, records=records)
