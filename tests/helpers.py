"""Shared builders for test data"""

import json
from typing import List
from tfs_gateway.domain.models import Vehicle


def make_vehicle(model: str, msrp: float, trim: str = "LE", year: int = 2025) -> Vehicle:
    return Vehicle(
        year=year,
        make="Toyota",
        model=model,
        trim=trim,
        msrp_usd=msrp,
        horsepower_hp=200,
        drivetrain="FWD",
        powertrain="Gas",
        body_style="Sedan",
        image_url=f"https://images.example.com/{model.lower()}.jpg",
    )


def gemini_envelope(text: str) -> dict:
    """generateContent response body carrying `text`"""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def ranking_text(vehicles: List[Vehicle], category: str = "affordable") -> str:
    return json.dumps(
        {
            "ranked_vehicles": [
                {
                    "year": v.year,
                    "make": v.make,
                    "model": v.model,
                    "trim": v.trim,
                    "reason": f"{v.model} fits the budget",
                    "category": category,
                }
                for v in vehicles
            ]
        }
    )
