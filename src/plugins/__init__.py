"""Language plugin entry points."""
