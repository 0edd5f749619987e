"""
Fit Report PDF Generator

Renders a shaped fit report (see fit_report.build_fit_report) to PDF.

Library Choice: ReportLab
- Pure Python, no external dependencies
- Deterministic output (same input = same PDF)
- Fine-grained control over layout

Output Structure:
1. Header (address, score, label, summary)
2. Fit Breakdown table
3. Accessibility (flags by severity, checklist)
4. Feature Match
5. Suggestions (by priority)
6. Footer note
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Final, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from utils.formatting import format_percent


# =============================================================================
# Constants
# =============================================================================

GENERATOR_VERSION: Final[str] = "1.0"

FOOTER_NOTE: Final[str] = (
    "This fit score is computed from listing data, public records and your "
    "stated preferences. Items marked unknown could not be verified and "
    "should be confirmed in person or with the listing agent."
)

SEVERITY_HEADINGS: Final[dict[str, str]] = {
    "blocker": "Blockers",
    "concern": "Concerns",
    "manageable": "Manageable",
    "clear": "Clear",
}

PRIORITY_HEADINGS: Final[dict[str, str]] = {
    "high": "High Priority",
    "medium": "Medium Priority",
    "low": "Low Priority",
}


# =============================================================================
# Color Palette - Print-friendly
# =============================================================================


class FitPalette:
    """Print-friendly colours for the fit report."""

    BLACK = colors.Color(0.1, 0.1, 0.1)
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white

    ACCENT = colors.Color(0.15, 0.25, 0.4)

    # Score tiers
    STRONG = colors.Color(0.15, 0.4, 0.25)
    GOOD = colors.Color(0.1, 0.4, 0.45)
    FAIR = colors.Color(0.6, 0.4, 0.1)
    WEAK = colors.Color(0.55, 0.2, 0.2)

    # Flag severity
    BLOCKER = colors.Color(0.55, 0.2, 0.2)
    CONCERN = colors.Color(0.6, 0.4, 0.1)
    MANAGEABLE = colors.Color(0.35, 0.38, 0.42)
    CLEAR = colors.Color(0.15, 0.4, 0.25)


TIER_COLORS: Final[dict[str, colors.Color]] = {
    "strong": FitPalette.STRONG,
    "good": FitPalette.GOOD,
    "fair": FitPalette.FAIR,
    "weak": FitPalette.WEAK,
}

SEVERITY_COLORS: Final[dict[str, colors.Color]] = {
    "blocker": FitPalette.BLOCKER,
    "concern": FitPalette.CONCERN,
    "manageable": FitPalette.MANAGEABLE,
    "clear": FitPalette.CLEAR,
}


# =============================================================================
# Style Configuration
# =============================================================================


def get_fit_styles() -> dict:
    """Paragraph styles for the fit report."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name="FitBrand",
        parent=styles["Normal"],
        fontSize=9,
        leading=12,
        textColor=FitPalette.SLATE,
        alignment=TA_LEFT,
        fontName="Helvetica",
        letterSpacing=1.5,
    ))

    styles.add(ParagraphStyle(
        name="FitTitle",
        parent=styles["Normal"],
        fontSize=18,
        leading=24,
        textColor=FitPalette.CHARCOAL,
        fontName="Helvetica-Bold",
        spaceAfter=4 * mm,
    ))

    styles.add(ParagraphStyle(
        name="FitScore",
        parent=styles["Normal"],
        fontSize=30,
        leading=34,
        textColor=FitPalette.ACCENT,
        alignment=TA_CENTER,
        fontName="Helvetica-Bold",
    ))

    styles.add(ParagraphStyle(
        name="FitScoreLabel",
        parent=styles["Normal"],
        fontSize=10,
        leading=13,
        textColor=FitPalette.SLATE,
        alignment=TA_CENTER,
        fontName="Helvetica-Bold",
    ))

    styles.add(ParagraphStyle(
        name="FitSectionTitle",
        parent=styles["Normal"],
        fontSize=13,
        leading=17,
        textColor=FitPalette.CHARCOAL,
        fontName="Helvetica-Bold",
        spaceBefore=14,
        spaceAfter=8,
    ))

    styles.add(ParagraphStyle(
        name="FitSubsectionTitle",
        parent=styles["Normal"],
        fontSize=10.5,
        leading=14,
        textColor=FitPalette.SLATE,
        fontName="Helvetica-Bold",
        spaceBefore=8,
        spaceAfter=4,
    ))

    styles.add(ParagraphStyle(
        name="FitBodyText",
        parent=styles["Normal"],
        fontSize=9.5,
        leading=14.25,
        textColor=FitPalette.CHARCOAL,
        spaceAfter=6,
        fontName="Helvetica",
    ))

    styles.add(ParagraphStyle(
        name="FitBulletText",
        parent=styles["Normal"],
        fontSize=9,
        leading=13,
        leftIndent=6 * mm,
        bulletIndent=2 * mm,
        spaceAfter=4,
        textColor=FitPalette.CHARCOAL,
        fontName="Helvetica",
    ))

    styles.add(ParagraphStyle(
        name="FitTableCell",
        parent=styles["Normal"],
        fontSize=8.5,
        leading=11,
        textColor=FitPalette.CHARCOAL,
        fontName="Helvetica",
    ))

    styles.add(ParagraphStyle(
        name="FitFooter",
        parent=styles["Normal"],
        fontSize=7.5,
        leading=10,
        textColor=FitPalette.GRAY,
        fontName="Helvetica",
        spaceBefore=12,
    ))

    return styles


# =============================================================================
# Fit Report PDF Generator
# =============================================================================


class FitReportPDFGenerator:
    """
    Generates fit report PDFs.

    Usage:
        generator = FitReportPDFGenerator()
        pdf_bytes = generator.generate_to_buffer(build_fit_report(result, profile))
    """

    PAGE_WIDTH, PAGE_HEIGHT = A4
    MARGIN_LEFT = 18 * mm
    MARGIN_RIGHT = 18 * mm
    MARGIN_TOP = 18 * mm
    MARGIN_BOTTOM = 22 * mm

    def __init__(self):
        self.styles = get_fit_styles()

    def generate_to_buffer(self, report: dict, address: Optional[str] = None) -> bytes:
        """Generate PDF and return as bytes."""
        buffer = BytesIO()
        self._build_document(report, address, buffer)
        return buffer.getvalue()

    def generate_to_file(self, report: dict, output_path: Path, address: Optional[str] = None) -> Path:
        """Generate PDF and write it to output_path."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.generate_to_buffer(report, address))
        return output_path

    def _build_document(self, report: dict, address: Optional[str], buffer: BytesIO):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=self.MARGIN_LEFT,
            rightMargin=self.MARGIN_RIGHT,
            topMargin=self.MARGIN_TOP,
            bottomMargin=self.MARGIN_BOTTOM,
            title=f"Fit Report - {address}" if address else "Fit Report",
            subject="Property Fit Assessment",
        )

        story = []
        story.extend(self._build_header(report, address))
        story.extend(self._build_breakdown(report))
        story.extend(self._build_accessibility(report))
        story.extend(self._build_features(report))
        story.extend(self._build_suggestions(report))
        story.append(Paragraph(FOOTER_NOTE, self.styles["FitFooter"]))

        doc.build(story, onFirstPage=self._draw_page_frame, onLaterPages=self._draw_page_frame)

    def _draw_page_frame(self, canvas_obj: canvas.Canvas, doc):
        """Draw footer with page number."""
        canvas_obj.saveState()
        canvas_obj.setFont("Helvetica", 7)
        canvas_obj.setFillColor(FitPalette.GRAY)
        canvas_obj.drawString(self.MARGIN_LEFT, self.MARGIN_BOTTOM - 10 * mm, "FIT REPORT")
        canvas_obj.drawRightString(
            self.PAGE_WIDTH - self.MARGIN_RIGHT,
            self.MARGIN_BOTTOM - 10 * mm,
            f"{doc.page}",
        )
        canvas_obj.restoreState()

    def _bullet(self, text: str) -> Paragraph:
        return Paragraph(f"• {escape(text)}", self.styles["FitBulletText"])

    # =========================================================================
    # Section 1: Header
    # =========================================================================

    def _build_header(self, report: dict, address: Optional[str]) -> list:
        elements = []
        elements.append(Paragraph("PROPERTY FIT REPORT", self.styles["FitBrand"]))
        elements.append(Spacer(1, 4 * mm))
        if address:
            elements.append(Paragraph(escape(address), self.styles["FitTitle"]))

        score_table = Table(
            [
                [Paragraph(str(report["overall_score"]), self.styles["FitScore"])],
                [Paragraph(escape(report["label_text"]).upper(), self.styles["FitScoreLabel"])],
            ],
            colWidths=[50 * mm],
        )
        score_table.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 0.75, FitPalette.LIGHT_GRAY),
            ("BACKGROUND", (0, 0), (-1, -1), FitPalette.PALE_GRAY),
            ("TOPPADDING", (0, 0), (-1, -1), 3 * mm),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3 * mm),
        ]))
        elements.append(score_table)
        elements.append(Spacer(1, 4 * mm))
        elements.append(Paragraph(escape(report["summary"]), self.styles["FitBodyText"]))
        elements.append(HRFlowable(width="100%", thickness=0.5, color=FitPalette.LIGHT_GRAY))
        return elements

    # =========================================================================
    # Section 2: Fit Breakdown
    # =========================================================================

    def _build_breakdown(self, report: dict) -> list:
        elements = [Paragraph("Fit Breakdown", self.styles["FitSectionTitle"])]

        table_data = [["Category", "Score", "Weight", "Details"]]
        for row in report["breakdown"]:
            table_data.append([
                row["name"],
                str(row["score"]),
                format_percent(row["weight_percent"], decimals=0),
                Paragraph(escape(row["details"]), self.styles["FitTableCell"]),
            ])

        commands = [
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("BACKGROUND", (0, 0), (-1, 0), FitPalette.CHARCOAL),
            ("TEXTCOLOR", (0, 0), (-1, 0), FitPalette.WHITE),
            ("TEXTCOLOR", (0, 1), (-1, -1), FitPalette.CHARCOAL),
            ("ALIGN", (1, 0), (2, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("GRID", (0, 0), (-1, -1), 0.5, FitPalette.LIGHT_GRAY),
            ("TOPPADDING", (0, 0), (-1, -1), 2 * mm),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 2 * mm),
        ]
        for index, row in enumerate(report["breakdown"], start=1):
            commands.append(("TEXTCOLOR", (1, index), (1, index), TIER_COLORS[row["tier"]]))
            commands.append(("FONTNAME", (1, index), (1, index), "Helvetica-Bold"))

        table = Table(table_data, colWidths=[35 * mm, 16 * mm, 16 * mm, 107 * mm])
        table.setStyle(TableStyle(commands))
        elements.append(table)
        return elements

    # =========================================================================
    # Section 3: Accessibility
    # =========================================================================

    def _build_accessibility(self, report: dict) -> list:
        accessibility = report["accessibility"]
        if not any(accessibility["counts"].values()) and not accessibility["checklist"]:
            return []

        elements = [Paragraph("Accessibility", self.styles["FitSectionTitle"])]

        for severity, flags in accessibility["flags"].items():
            if not flags:
                continue
            heading = ParagraphStyle(
                name=f"FitSeverity{severity}",
                parent=self.styles["FitSubsectionTitle"],
                textColor=SEVERITY_COLORS[severity],
            )
            elements.append(Paragraph(f"{SEVERITY_HEADINGS[severity]} ({len(flags)})", heading))
            for flag in flags:
                elements.append(Paragraph(
                    f"<b>{escape(flag['label'])}:</b> {escape(flag['issue'])}",
                    self.styles["FitBodyText"],
                ))
                elements.append(self._bullet(flag["recommendation"]))

        if accessibility["checklist"]:
            elements.append(Paragraph("What to look for", self.styles["FitSubsectionTitle"]))
            for item in accessibility["checklist"]:
                elements.append(self._bullet(item))

        return elements

    # =========================================================================
    # Section 4: Feature Match
    # =========================================================================

    def _build_features(self, report: dict) -> list:
        features = report["features"]
        rows = features["matched"] + features["missed"]
        if not rows:
            return []

        elements = [Paragraph("Feature Match", self.styles["FitSectionTitle"])]
        table_data = [["Feature", "Importance", "Status", "Notes"]]
        for match in rows:
            table_data.append([
                match["label"],
                match["importance"].replace("_", " ").title(),
                match["status"].title(),
                Paragraph(escape(match["explanation"]), self.styles["FitTableCell"]),
            ])

        table = Table(table_data, colWidths=[40 * mm, 26 * mm, 20 * mm, 88 * mm])
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("BACKGROUND", (0, 0), (-1, 0), FitPalette.CHARCOAL),
            ("TEXTCOLOR", (0, 0), (-1, 0), FitPalette.WHITE),
            ("TEXTCOLOR", (0, 1), (-1, -1), FitPalette.CHARCOAL),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("GRID", (0, 0), (-1, -1), 0.5, FitPalette.LIGHT_GRAY),
            ("TOPPADDING", (0, 0), (-1, -1), 2 * mm),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 2 * mm),
        ]))
        elements.append(table)
        return elements

    # =========================================================================
    # Section 5: Suggestions
    # =========================================================================

    def _build_suggestions(self, report: dict) -> list:
        if not report["suggestion_count"]:
            return []

        elements = [Paragraph("Suggestions", self.styles["FitSectionTitle"])]
        for priority, suggestions in report["suggestions"].items():
            if not suggestions:
                continue
            elements.append(Paragraph(PRIORITY_HEADINGS[priority], self.styles["FitSubsectionTitle"]))
            for suggestion in suggestions:
                elements.append(Paragraph(
                    f"<b>{escape(suggestion['title'])}</b>: {escape(suggestion['description'])}",
                    self.styles["FitBulletText"],
                ))
        return elements
