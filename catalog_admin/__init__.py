"""
Catalog Admin Core

Client-side core of an e-commerce catalog administration console: entity
model, variant SKU composition, optimistic-after-success stores and the
REST gateway they synchronize through.
"""

__version__ = "1.0.0"
