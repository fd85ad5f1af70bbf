import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from config import load_settings
from database import db
from logging_utils import get_logger, setup_logging
from schemas import VoteOption
from store import (
    InMemoryVoteStore,
    InvalidOption,
    MongoVoteStore,
    StoreUnavailable,
    VoteRecord,
    VoteStore,
    seed_demo_votes,
)
from weeks import thursday_label

settings = load_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)


def build_store() -> VoteStore:
    if db is not None:
        return MongoVoteStore(db)
    logger.warning("DATABASE_URL not set, votes are kept in memory")
    return InMemoryVoteStore()


vote_store = build_store()


def get_store() -> VoteStore:
    return vote_store


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if isinstance(vote_store, MongoVoteStore):
        try:
            vote_store.ensure_indexes()
        except StoreUnavailable:
            logger.warning("Could not create vote indexes at startup")
    yield


app = FastAPI(title="Thursday Office Vibes API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------- Pydantic request/response models (separate from DB schemas) ---------
class VoteRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    option: VoteOption

class VoteCreated(BaseModel):
    id: str

class VoteView(BaseModel):
    id: str
    name: str
    option: VoteOption
    submittedAt: int

class HistoryVote(BaseModel):
    name: str
    option: VoteOption
    submittedAt: int

class WeekHistory(BaseModel):
    weekStart: int
    votes: List[HistoryVote]

class TallyItem(BaseModel):
    option: VoteOption
    count: int
    names: List[str]

class TallyResponse(BaseModel):
    weekStart: int
    total_votes: int
    results: List[TallyItem]

class VoterStatus(BaseModel):
    name: str
    has_voted: bool
    option: Optional[VoteOption] = None

class WeekInfo(BaseModel):
    weekStart: int
    thursday: str


# ---------------------------- Utility functions ----------------------------

def to_vote_view(record: VoteRecord) -> VoteView:
    return VoteView(
        id=record.id,
        name=record.name,
        option=record.option,
        submittedAt=record.submitted_at,
    )


def voter_name(name: str = Query(...)) -> str:
    """Query-string name, trimmed; blank names are rejected like in VoteRequest."""
    name = name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="name must not be blank")
    return name


# ---------------------------- Error handlers ----------------------------
@app.exception_handler(StoreUnavailable)
def store_unavailable_handler(_request: Request, exc: StoreUnavailable):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(InvalidOption)
def invalid_option_handler(_request: Request, exc: InvalidOption):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# --------------------------------- Routes ---------------------------------
@app.get("/", tags=["system"])
def read_root():
    return {"message": "Thursday Office Vibes API is running"}


@app.get("/test", tags=["system"])
def test_database(store: VoteStore = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "store": type(store).__name__,
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    if db is None:
        response["database"] = "⚠️  Not configured, using in-memory store"
        return response
    response["database_name"] = db.name
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except Exception as e:
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


@app.get("/api/week", response_model=WeekInfo, tags=["public"])
def get_week(store: VoteStore = Depends(get_store)):
    return WeekInfo(weekStart=store.current_week(), thursday=thursday_label(store.now().date()))


@app.get("/api/votes/current", response_model=List[VoteView], tags=["public"])
def get_current_week_votes(store: VoteStore = Depends(get_store)):
    return [to_vote_view(r) for r in store.current_week_votes()]


@app.get("/api/votes/history", response_model=List[WeekHistory], tags=["public"])
def get_vote_history(store: VoteStore = Depends(get_store)):
    return [
        WeekHistory(
            weekStart=week,
            votes=[HistoryVote(name=r.name, option=r.option, submittedAt=r.submitted_at) for r in records],
        )
        for week, records in store.vote_history()
    ]


@app.get("/api/votes/tally", response_model=TallyResponse, tags=["public"])
def get_tally(store: VoteStore = Depends(get_store)):
    results = [
        TallyItem(option=option, count=len(records), names=[r.name for r in records])
        for option, records in store.tally()
    ]
    return TallyResponse(
        weekStart=store.current_week(),
        total_votes=sum(item.count for item in results),
        results=results,
    )


@app.get("/api/votes/status", response_model=VoterStatus, tags=["public"])
def get_voter_status(name: str = Depends(voter_name), store: VoteStore = Depends(get_store)):
    record = store.find_current(name)
    return VoterStatus(name=name, has_voted=record is not None, option=record.option if record else None)


@app.post("/api/votes", response_model=VoteCreated, tags=["public"])
def add_vote(payload: VoteRequest, store: VoteStore = Depends(get_store)):
    vote_id = store.upsert_vote(payload.name, payload.option)
    return VoteCreated(id=vote_id)


@app.delete("/api/votes", tags=["public"])
def delete_vote(name: str = Depends(voter_name), store: VoteStore = Depends(get_store)):
    # No vote this week is a no-op.
    store.delete_vote(name)
    return {"success": True}


# ----------------------- Optional demo seed endpoint -----------------------
@app.post("/api/seed-demo", tags=["system"])
def seed_demo(store: VoteStore = Depends(get_store)):
    return {"seeded": seed_demo_votes(store)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
