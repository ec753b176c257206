"""TS Review: style-guide review for TypeScript, JavaScript and React code."""

__version__ = "0.1.0"
