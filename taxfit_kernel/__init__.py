"""
TaxFit Kernel

Shared infrastructure for the tax fitting packages:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
"""

__version__ = "0.1.0"
