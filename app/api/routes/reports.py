import io

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.schemas.esg import ESGScoreResult
from app.services.report_generator import generate_esg_report_pdf

router = APIRouter()


@router.post("/esg/pdf")
def create_esg_pdf_report(result: ESGScoreResult):
    """
    Generate a PDF ESG report from a score result.
    """
    pdf_bytes = generate_esg_report_pdf(result)
    buffer = io.BytesIO(pdf_bytes)

    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=esg_report.pdf"},
    )
