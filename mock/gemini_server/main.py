from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Gemini Server", version="1.0.0")
# Support both local development and Docker
CATALOG = Path("/catalog/vehicles.json") if os.path.exists("/catalog/vehicles.json") else Path(__file__).resolve().parents[2] / "tfs_gateway" / "data" / "vehicles.json"


def _envelope(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def _ranking_text() -> str:
    vehicles = sorted(json.loads(CATALOG.read_text()), key=lambda v: v["msrp_usd_est"])
    ranked = [
        {
            "year": v["year"],
            "make": v["make"],
            "model": v["model"],
            "trim": v["trim"],
            "reason": "Mock ranking by price",
            "category": "affordable" if i % 3 != 2 else "stretch",
        }
        for i, v in enumerate(vehicles)
    ]
    return "```json\n" + json.dumps({"ranked_vehicles": ranked}, indent=2) + "\n```"


@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/v1beta/models/{model}:generateContent")
def generate_content(model: str, body: dict, x_goog_api_key: str = Header(default="")):
    if not x_goog_api_key:
        raise HTTPException(status_code=403, detail="missing API key")
    prompt = body["contents"][0]["parts"][0]["text"]
    if "ranked_vehicles" in prompt:
        return JSONResponse(content=_envelope(_ranking_text()))
    return JSONResponse(content=_envelope("County: Travis County\nTax: 8.25"))
