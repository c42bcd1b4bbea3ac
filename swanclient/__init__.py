"""swanclient - drive Filecoin storage deals between a Lotus node and the Swan task service."""

__version__ = "0.1.0"
