"""Core utilities and shared infrastructure.

- config: Engine configuration and per-city definitions
- constants: Named constants (earth radius, projection scale factors)
- exceptions: Custom exception hierarchy
"""
