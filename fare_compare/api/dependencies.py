"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from fare_compare.engine import FareComparisonEngine
from fare_compare.settings import Settings


def get_engine(request: Request) -> FareComparisonEngine:
    """Retrieve FareComparisonEngine from app state."""
    return request.app.state.engine


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


EngineDep = Annotated[FareComparisonEngine, Depends(get_engine)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
