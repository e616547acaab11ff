# /shopstream/routes/diagnostics.py

from typing import List

from fastapi import APIRouter, Depends

from shopstream.models.api import DiagnosticResult
from shopstream.services.catalog_service import CatalogService
from shopstream.services.diagnostics_service import run_diagnostics
from shopstream.utils.dependencies import get_catalog_service

router = APIRouter(tags=["Diagnostics"])


@router.get("/diagnostics", response_model=List[DiagnosticResult])
async def diagnostics(catalog_service: CatalogService = Depends(get_catalog_service)):
    """Runs the storefront self-checks and reports each as PASS/FAIL."""
    return [DiagnosticResult(**result) for result in await run_diagnostics(catalog_service)]
