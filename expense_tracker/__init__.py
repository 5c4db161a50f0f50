"""Top-level package for the expense tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``calculations`` – totals, category breakdowns, trends and forecasts
* ``storage`` – local persistence, JSON backups and CSV export
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run expense_tracker/Home.py
```
"""

from . import calculations  # noqa: F401  # re-exported for convenience
from . import storage  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
# Streamlit may not be installed in all environments (e.g. during unit
# testing), so the dashboard is imported lazily.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["calculations", "storage", "visualization", "dashboard"]
