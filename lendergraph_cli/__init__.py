"""LenderGraph CLI: lender matching and radial match-graph rendering."""

__version__ = "0.3.0"
