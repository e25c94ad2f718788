"""Ocean Tours API: marine expedition catalog, checkout and administration."""

__version__ = "1.0.0"
