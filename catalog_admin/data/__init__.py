"""
Demo Data Module
"""
from .seed import CatalogSeeder, SeedReport

__all__ = [
    "CatalogSeeder",
    "SeedReport",
]
