"""Hotel listing: enrich stored hotels and filter them by room and location criteria."""

__version__ = "0.1.0"
