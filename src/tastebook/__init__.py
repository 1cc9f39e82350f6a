"""
Tastebook Pro - recipes, weekly meal plans and shopping lists on Supabase.

Packages:
- domain: Pure helpers (ingredient categories, matcher, week math, grids)
- services: Thin query wrappers over Supabase tables, RPCs and storage
- web: FastAPI routes consumed by the front-end
"""

__version__ = "1.0.0"
