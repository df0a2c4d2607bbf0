"""FastAPI server exposing resolve_and_roast to a front-end."""
import logging
import os

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from roast_lens.pipeline import roast_handle

_log = logging.getLogger(__name__)

app = FastAPI(title="roast-lens API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class RoastRequest(BaseModel):
    handle: str
    platform: str = "x"
    source: str = "primary"


@app.get("/api/health")
def health():
    """Check that the credential required for the primary source is set."""
    if not os.getenv("X_BEARER_TOKEN"):
        raise HTTPException(status_code=503, detail="X_BEARER_TOKEN not set")
    return {"status": "ok"}


@app.post("/api/roast")
async def roast(req: RoastRequest):
    """Resolve the handle and return the roast. User-facing failures come back as status=error."""
    result = await roast_handle(req.handle, platform=req.platform, source=req.source)
    payload = result.model_dump(mode="json")
    if result.audio is not None:
        payload["audio"]["src"] = result.audio.data_uri
    return payload
