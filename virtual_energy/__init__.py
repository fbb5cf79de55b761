"""Virtual DA/RT trading against ERCOT settlement point prices."""

__version__ = "0.1.0"
