"""Engine stages.

- land_mask: load and memoize city land polygons
- compute_safe_zones: land minus restricted-place buffers
- build_catalog: one variant per restricted-category subset
"""
