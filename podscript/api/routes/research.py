from fastapi import APIRouter, HTTPException

from podscript.api.deps import SearchClientCurrent
from podscript.models import ResearchBundle
from podscript.worker.tools import collect_research

router = APIRouter(prefix="/research", tags=["Research"])


@router.get("", response_model=ResearchBundle)
async def get_research(search_client: SearchClientCurrent, q: str | None = None) -> ResearchBundle:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing search query")

    return await collect_research(q.strip(), client=search_client)
