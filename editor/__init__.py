"""Pure chart editing core for Chart Studio.

This package holds the chart data model, dataset validation and construction,
grouping/uniformity rules, and the cross-family transition negotiator. It
must not import Django or perform any database I/O.
"""

from .session import ChartEditingSession

__all__ = ["ChartEditingSession"]
