"""
Domain Package
==============
Sensor descriptors, fleet state and the exception hierarchy.
"""
