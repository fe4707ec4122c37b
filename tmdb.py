"""
TMDB API client
Thin wrapper over the v3 REST API: injects the API key and the default
language into every call and turns any failure into UpstreamError.
"""

import logging
import os

import requests

from errors import UpstreamError

logger = logging.getLogger(__name__)

BASE_URL = 'https://api.themoviedb.org/3'
DEFAULT_LANGUAGE = 'es-MX'
DEFAULT_TIMEOUT = 10

# Public category name -> TMDB list path
MOVIE_LISTS = {
    'popular': '/movie/popular',
    'top': '/movie/top_rated',
    'upcoming': '/movie/upcoming',
    'playing': '/movie/now_playing',
}

_UNSET = object()


class TMDBClient:
    def __init__(self, api_key, language=DEFAULT_LANGUAGE, timeout=DEFAULT_TIMEOUT, base_url=BASE_URL):
        self.api_key = api_key
        self.language = language
        self.timeout = timeout
        self.base_url = base_url

    @classmethod
    def from_env(cls):
        return cls(
            api_key=os.getenv('TMDB_API_KEY', ''),
            language=os.getenv('TMDB_LANGUAGE', DEFAULT_LANGUAGE),
            timeout=float(os.getenv('TMDB_TIMEOUT', DEFAULT_TIMEOUT)),
        )

    def fetch(self, path, params=None, language=_UNSET):
        """
        GET a TMDB path and return the decoded JSON body.

        `language` overrides the client default; None drops the parameter.
        Raises UpstreamError on network failure or non-2xx status.
        """
        query = dict(params or {})
        query['api_key'] = self.api_key
        if language is _UNSET:
            language = self.language
        if language:
            query['language'] = language

        url = f"{self.base_url}{path}"
        try:
            response = requests.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("TMDB request to %s failed: %s", path, e)
            raise UpstreamError() from e

        if not response.ok:
            logger.warning("TMDB %s answered %s", path, response.status_code)
            raise UpstreamError(status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning("TMDB %s returned a non-JSON body", path)
            raise UpstreamError(status=response.status_code) from e

    def movie_list(self, category, page=1):
        """Raw `results` of one page of a movie list (popular, top, ...)"""
        data = self.fetch(MOVIE_LISTS[category], {'page': page})
        return data.get('results', [])

    def movie_details(self, movie_id):
        return self.fetch(f"/movie/{movie_id}")

    def movie_videos(self, movie_id):
        return self.fetch(f"/movie/{movie_id}/videos")

    def movie_images(self, movie_id):
        # Backdrops are filtered by language when one is sent
        return self.fetch(f"/movie/{movie_id}/images", language=None)

    def search_movies(self, query):
        data = self.fetch('/search/movie', {'query': query})
        return data.get('results', [])
