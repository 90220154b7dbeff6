"""
Cleaning and exploratory analytics for the World Life Expectancy dataset.
"""

__version__ = "0.1.0"
