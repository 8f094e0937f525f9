"""
Fetcher exports.
"""

from app.acquisition.fetchers.api_fetcher import ApiFetcher
from app.acquisition.fetchers.base import Fetcher, FetchOutcome
from app.acquisition.fetchers.registry import FetcherRegistry
from app.acquisition.fetchers.scraping_fetcher import ScrapingFetcher
from app.acquisition.fetchers.seed_data import seed_records

__all__ = [
    "ApiFetcher",
    "FetchOutcome",
    "Fetcher",
    "FetcherRegistry",
    "ScrapingFetcher",
    "seed_records",
]
