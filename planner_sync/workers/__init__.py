"""
Workers - long-running and one-shot jobs against the world planner store.
"""
from .reconciliation_worker import ReconciliationWorker

__all__ = ['ReconciliationWorker']
