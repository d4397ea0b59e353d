"""
NYC Shooting Report

Loads the NYPD Shooting Incident dataset, cleans it, buckets incidents by
time of day and reports per-borough proportions by victim race, time of day
and year.
"""

__version__ = "0.1.0"
