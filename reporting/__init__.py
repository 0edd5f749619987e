"""
Reporting module for the fit and trust engine.

Shapes engine results for display and renders fit reports to PDF.

Usage:
    from reporting import build_fit_report, FitReportPDFGenerator

    report = build_fit_report(result, profile)
    pdf_bytes = FitReportPDFGenerator().generate_to_buffer(report, address)

Trust report for an analysed listing:
    from reporting import build_trust_report

    report = build_trust_report(record, category=ScoringCategory.PRICING_ANOMALY)
"""

from .fit_report import (
    build_fit_report,
    build_trust_report,
    ppsf_difference,
    score_tier,
    sort_claims,
)
from .fit_pdf_generator import FitReportPDFGenerator, get_fit_styles

__all__ = [
    "build_fit_report",
    "build_trust_report",
    "ppsf_difference",
    "score_tier",
    "sort_claims",
    "FitReportPDFGenerator",
    "get_fit_styles",
]
