"""Ad-hoc search routes — fuzzy ranking and filters over a supplied file list."""

from fastapi import APIRouter, Depends

from fileindex.api.deps import get_search
from fileindex.schemas.files import FileRecord
from fileindex.schemas.search import FilterRequest, FuzzySearchRequest, SearchHit
from fileindex.services.search_service import SearchService, apply_filters

router = APIRouter()


@router.post("/fuzzy", response_model=list[SearchHit])
async def fuzzy_search(body: FuzzySearchRequest, search: SearchService = Depends(get_search)):
    files = apply_filters(body.files, body.filters) if body.filters else body.files
    return search.search_fuzzy(body.query, files, threshold=body.threshold)


@router.post("/filter", response_model=list[FileRecord])
async def filter_files(body: FilterRequest):
    return apply_filters(body.files, body.filters)
