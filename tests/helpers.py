from unittest.mock import MagicMock


def make_result(scalar=None, scalars=None, rows=None, count=None):
    """Build the object returned by an awaited ``session.execute``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar.return_value = count
    result.scalars.return_value.all.return_value = scalars or []
    result.scalars.return_value.first.return_value = (scalars or [None])[0]
    result.all.return_value = rows or []
    return result
