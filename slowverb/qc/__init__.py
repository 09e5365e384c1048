"""
Quality Control module for evaluating rendered exports.
"""
from slowverb.qc.qc import analyze, fingerprint
from slowverb.qc.thresholds import QC_THRESHOLDS

__all__ = ["analyze", "fingerprint", "QC_THRESHOLDS"]
