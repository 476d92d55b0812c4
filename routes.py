from datetime import datetime, timezone
from typing import Iterator, Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response, StreamingResponse
from config import Settings, get_settings
from models import AnalyzeRequest, AnalyzeResponse, ExportRequest
from analyzer.orchestrator import LinkAnalyzer
from analyzer.screenshot import parse_screenshot_ref
from utils.clients.cloudflare import UrlScannerClient
from utils.validation import split_valid_urls
import logging
import requests
import traceback

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Create router
router = APIRouter()


# ======================
# Dependencies
# ======================

def get_link_analyzer(settings: Settings = Depends(get_settings)) -> Iterator[LinkAnalyzer]:
    analyzer = LinkAnalyzer.from_settings(settings)
    try:
        yield analyzer
    finally:
        analyzer.close()


def get_url_scanner(settings: Settings = Depends(get_settings)) -> Iterator[UrlScannerClient]:
    scanner = UrlScannerClient(settings.credentials)
    try:
        yield scanner
    finally:
        scanner.close()


def make_screenshot_loader(scanner: UrlScannerClient, timeout: float = 15.0):
    """
    Resolve a result's screenshot reference to image bytes.

    Proxy references (/screenshot/{id}) are served from the URL Scanner
    directly, the same bytes the GET /screenshot route returns.
    """

    def load(ref: str) -> Optional[bytes]:
        scan_id = parse_screenshot_ref(ref)
        if scan_id:
            return scanner.get_screenshot(scan_id)

        if ref.startswith(("http://", "https://")):
            try:
                response = requests.get(ref, timeout=timeout)
            except requests.RequestException as e:
                logger.warning(f"Screenshot download failed for {ref}: {str(e)}")
                return None
            return response.content if response.ok else None

        return None

    return load


def _export_filename(prefix: str, extension: str) -> str:
    return f"{prefix}-{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.{extension}"


def _require_results(request: ExportRequest):
    if not request.results:
        raise HTTPException(status_code=400, detail={"error": "No results to export"})
    return request.results


# ======================
# Routes
# ======================

@router.get("/")
async def root():
    return {
        "service": "Link Traffic Analyzer",
        "status": "running",
        "endpoints": {
            "analyze": "/analyze (POST)",
            "export_excel": "/export/excel (POST)",
            "export_pdf": "/export/pdf (POST)",
            "screenshot": "/screenshot/{scan_id} (GET)",
        },
    }


@router.post("/analyze", response_model=AnalyzeResponse, response_model_exclude_none=True)
async def analyze_links(
    request: AnalyzeRequest, analyzer: LinkAnalyzer = Depends(get_link_analyzer)
):
    """
    Analyzes a batch of URLs for traffic, sentiment and screenshots.

    Invalid entries are skipped as long as at least one URL is valid; if none
    are, the request is rejected with the list of offending entries.

    Error bodies use FastAPI's HTTPException envelope, so the payload sits
    under "detail": {"detail": {"error": ..., "details": [...]}}.
    """
    if not request.urls:
        raise HTTPException(
            status_code=400, detail={"error": "Please provide an array of URLs"}
        )

    valid_urls, errors = split_valid_urls(request.urls)

    if not valid_urls:
        raise HTTPException(
            status_code=400,
            detail={"error": "No valid URLs provided", "details": errors},
        )

    if errors:
        logger.info(f"Skipping {len(errors)} invalid URL(s): {errors}")

    try:
        results = await analyzer.analyze_urls(valid_urls)
        return AnalyzeResponse(results=results)
    except Exception as e:
        logger.error(f"ERROR: Analysis failed: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=500, detail={"error": "Failed to analyze URLs"}
        )


@router.post("/export/excel")
def export_excel(request: ExportRequest):
    """
    Export analysis results as an .xlsx attachment (one row per result).
    """
    from utils.reporting.excel import generate_excel

    results = _require_results(request)

    try:
        buffer = generate_excel(results)
    except Exception as e:
        logger.error(f"Excel export error: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=500, detail={"error": "Failed to generate Excel file"}
        )

    filename = _export_filename("link-traffic-data", "xlsx")
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/export/pdf")
def export_pdf(
    request: ExportRequest,
    scanner: UrlScannerClient = Depends(get_url_scanner),
    settings: Settings = Depends(get_settings),
):
    """
    Export analysis results as a paginated PDF report.

    Screenshots are loaded synchronously through the screenshot proxy and
    silently omitted when unavailable.
    """
    from utils.reporting.pdf import generate_pdf, register_fonts

    results = _require_results(request)

    try:
        register_fonts()
        pdf_buffer = generate_pdf(
            results,
            output_path=None,
            screenshot_loader=make_screenshot_loader(scanner, settings.HTTP_TIMEOUT),
            max_dimension=settings.MAX_SCREENSHOT_DIMENSION,
        )
    except Exception as e:
        logger.error(f"PDF export error: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail={"error": "Failed to generate PDF"})

    filename = _export_filename("link-traffic-report", "pdf")
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/screenshot/{scan_id}")
def get_screenshot(
    scan_id: str,
    scanner: UrlScannerClient = Depends(get_url_scanner),
    settings: Settings = Depends(get_settings),
):
    """
    Proxy the URL Scanner desktop screenshot for a scan.
    """
    screenshot = scanner.get_screenshot(scan_id)

    if not screenshot:
        raise HTTPException(status_code=404, detail={"error": "Screenshot not found"})

    return Response(
        content=screenshot,
        media_type="image/png",
        headers={"Cache-Control": f"public, max-age={settings.SCREENSHOT_CACHE_MAX_AGE}"},
    )


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/status/detailed")
async def detailed_status_check(settings: Settings = Depends(get_settings)):
    """
    Configuration status of the external providers.

    Missing credentials are not an error: traffic falls back to estimates and
    screenshots are skipped, so the service reports itself as degraded.
    """
    credentials = settings.credentials
    status_info = {
        "api": "healthy",
        "cloudflare_radar": "configured" if credentials.has_token else "missing",
        "cloudflare_url_scanner": "configured" if credentials.can_scan else "missing",
    }

    if credentials.has_token and credentials.can_scan:
        status_info["overall_status"] = "healthy"
    else:
        status_info["overall_status"] = "degraded"

    return status_info
