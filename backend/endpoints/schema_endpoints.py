from fastapi import APIRouter, Depends

from recordmapper import Repository
from deps import get_repository

router = APIRouter()


@router.post("/api/schema")
def apply_schema(max_workers: int | None = None, repository: Repository = Depends(get_repository)):
    report = repository.create_tables(max_workers)
    return {
        "ok": report.ok,
        "executed": report.executed,
        "errors": sorted(str(e) for e in report.errors),
    }
