from datetime import datetime, timezone

from fpdf import FPDF

from app.schemas.esg import ESGScoreResult


def _latin1(text: str) -> str:
    # Core fonts only cover latin-1; anything else prints as "?".
    return text.encode("latin-1", "replace").decode("latin-1")


def _heading(pdf: FPDF, text: str) -> None:
    pdf.ln(6)
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, _latin1(text), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 11)


def _line(pdf: FPDF, text: str) -> None:
    pdf.multi_cell(0, 6, _latin1(text), new_x="LMARGIN", new_y="NEXT")


def generate_esg_report_pdf(result: ESGScoreResult) -> bytes:
    """
    Generate an ESG score report from an ESGScoreResult.
    Returns PDF as raw bytes.
    """
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    # Title
    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, "ESG Score Report", new_x="LMARGIN", new_y="NEXT", align="C")

    # Meta
    pdf.ln(5)
    pdf.set_font("Helvetica", "", 12)
    _line(pdf, f"Company: {result.company_id or 'n/a'}")
    _line(pdf, f"Industry: {result.industry}")
    _line(pdf, f"Calculated: {result.calculated_at.isoformat()}")
    _line(pdf, f"Generated: {datetime.now(timezone.utc).isoformat()}")

    # Scores
    _heading(pdf, "Scores")
    _line(pdf, f"Overall ESG Score: {result.overall_score} (rating {result.rating})")
    for name, category in result.category_scores:
        _line(pdf, f"{name.capitalize()}: {category.score} - {category.performance}")

    comparison = result.industry_comparison
    _line(pdf, f"Industry position: {comparison.position} (percentile {comparison.percentile})")

    # Recommendations
    _heading(pdf, "Recommendations")
    if result.recommendations:
        for rec in result.recommendations:
            _line(pdf, f"- [{rec.priority}] {rec.category}: {rec.action}. {rec.impact}.")
    else:
        _line(pdf, "No category scored below the recommendation threshold.")

    # Risks
    _heading(pdf, "Risk Assessment")
    if result.risk_assessment:
        for risk in result.risk_assessment:
            _line(pdf, f"- [{risk.level}] {risk.type}: {risk.description}. Mitigation: {risk.mitigation}.")
    else:
        _line(pdf, "No material ESG risks flagged.")

    # Methodology
    _heading(pdf, "Methodology")
    _line(pdf, "Metrics are tiered against industry median and top-quartile benchmarks (90/70/50/30).")
    _line(pdf, "Unbenchmarked metrics score a neutral 50. Weights: E=40%, S=30%, G=30%.")

    return bytes(pdf.output())
