"""SuiSage: natural-language questions about Sui DeFi markets."""

__version__ = "0.1.0"
