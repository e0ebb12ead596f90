"""Safe-zone engine.

Computes the parts of a city's land where a regulated activity is
permitted: the land mask minus a fixed-radius exclusion buffer around
every restricted place (schools, rehab centers, ...).  Results are
pre-computed for every subset of the city's restricted categories and
handed to a cache writer by the sync job.
"""

__version__ = "0.1.0"
