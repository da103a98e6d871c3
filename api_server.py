import logging
from functools import lru_cache
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from core.exceptions import AdvisorError
from core.models import ChatResponse, Season
from core.season_manager import SeasonManager
from graph import ChatService, build_chat_service

logger = logging.getLogger(__name__)

app = FastAPI(title="Pepper Advisor API")

class ChatRequest(BaseModel):
    message: str
    active_farm_id: Optional[str] = None

class SeasonCreate(BaseModel):
    season_name: str = ""
    start_month: int
    start_year: int
    end_month: int
    end_year: int
    created_by: str

@lru_cache
def get_chat_service() -> ChatService:
    return build_chat_service()

@lru_cache
def get_season_manager() -> SeasonManager:
    return SeasonManager()

@app.get("/health")
def health():
    return {"status": "ok"}

# Plain `def` handlers: FastAPI runs each request on its thread pool.
@app.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest, chat_service: ChatService = Depends(get_chat_service)):
    try:
        return chat_service.answer(request.message, request.active_farm_id)
    except AdvisorError as e:
        logger.error(f"---API: Chat request failed: {e}---")
        raise HTTPException(status_code=503, detail="Advisor is temporarily unavailable.")

def _unavailable(e: AdvisorError) -> HTTPException:
    logger.error(f"---API: Season request failed: {e}---")
    return HTTPException(status_code=503, detail="Season registry is temporarily unavailable.")

@app.get("/farms/{farm_id}/seasons", response_model=List[Season])
def list_seasons(farm_id: str, season_manager: SeasonManager = Depends(get_season_manager)):
    try:
        return season_manager.list_seasons(farm_id)
    except AdvisorError as e:
        raise _unavailable(e)

@app.get("/farms/{farm_id}/seasons/current", response_model=Season)
def current_season(farm_id: str, season_manager: SeasonManager = Depends(get_season_manager)):
    try:
        season = season_manager.get_current_season(farm_id)
    except AdvisorError as e:
        raise _unavailable(e)
    if season is None:
        raise HTTPException(status_code=404, detail="No season in progress for this farm.")
    return season

@app.post("/farms/{farm_id}/seasons", response_model=Season, status_code=201)
def create_season(farm_id: str, body: SeasonCreate,
                  season_manager: SeasonManager = Depends(get_season_manager)):
    try:
        season = Season(farm_id=farm_id, **body.model_dump())
        return season_manager.add_season(season)
    except AdvisorError as e:
        raise _unavailable(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8001)
