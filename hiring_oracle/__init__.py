"""
Hiring Oracle - probabilistic forecast of the next hire for a recruiting pipeline.
"""

__version__ = "1.0.0"
