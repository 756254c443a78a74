"""Unbounded-growth analysis over Go syntax trees."""
