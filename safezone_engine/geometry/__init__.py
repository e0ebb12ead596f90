"""Spherical math and ring-level geometry.

- geomath: haversine distance, destination point, longitude normalization
- ring_ops: ring closure, point-in-polygon, local-projection area and centroid
- buffer: polygonal approximation of a geodesic disk
"""
