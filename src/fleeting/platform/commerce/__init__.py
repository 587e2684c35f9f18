"""Guarded storefront resources: categories, subcategories, products, orders."""
