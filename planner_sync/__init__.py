"""
planner_sync - keeps the world planner database in step with the item
catalog and the texture / weather image files.
"""

__version__ = "1.0.0"
