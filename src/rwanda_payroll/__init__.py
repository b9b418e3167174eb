"""Rwanda statutory payroll tax engine."""

__version__ = "0.1.0"
