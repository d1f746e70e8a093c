"""
API request models using Pydantic.
"""
from typing import Any, List
from pydantic import BaseModel, Field


class AreaRequest(BaseModel):
    """Farm boundaries submitted from the authoring UI."""
    boundaries: List[List[Any]] = Field(
        description="Polygon rings; each vertex is a GeoJSON [lng, lat] position "
                    "or any supported location shape"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "boundaries": [
                    [[0, 0], [0.001, 0], [0.001, 0.001], [0, 0.001], [0, 0]],
                ]
            }
        }


class LocationRequest(BaseModel):
    """Capture location in any supported shape."""
    location: Any = Field(
        description="{lat, lng}, {latitude, longitude}, {x, y}, '(lng,lat)', "
                    "'POINT(lng lat)' or 'lng,lat'"
    )

    class Config:
        json_schema_extra = {
            "example": {"location": {"lat": 0.0005, "lng": 0.00015}}
        }
