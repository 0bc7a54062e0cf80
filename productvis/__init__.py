"""productvis - schema-less product sheet classification and profit engine."""

__version__ = "0.3.0"
