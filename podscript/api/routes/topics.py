from fastapi import APIRouter, HTTPException

from podscript.api.deps import LLMCurrent
from podscript.models import TopicSuggestion

router = APIRouter(prefix="/topics", tags=["Topics"])


@router.get("", response_model=list[TopicSuggestion])
async def suggest_topics(llm: LLMCurrent, q: str | None = None) -> list[TopicSuggestion]:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing query parameter")

    return await llm.suggest_topics(q.strip())
