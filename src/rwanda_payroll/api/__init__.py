"""Preview HTTP API over the payroll calculators."""
