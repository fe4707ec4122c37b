"""
Movie listings and details built on top of TMDB
Reshapes raw catalog records into the public summary/detail schema.
"""

import logging
import random
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from errors import NotFoundError, ValidationError
from tmdb import MOVIE_LISTS

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = 'https://image.tmdb.org/t/p/w500'
YOUTUBE_WATCH_URL = 'https://www.youtube.com/watch?v='

RANDOM_PAGES = 10
RANDOM_COUNT = 10
MAX_DETAIL_IMAGES = 5
# TMDB rejects list pages above this
MAX_PAGE = 500


def to_summary(movie, image_base_url=IMAGE_BASE_URL):
    backdrop = movie.get('backdrop_path')
    return {
        'id': movie.get('id'),
        'title': movie.get('title'),
        'imageUrl': f"{image_base_url}{backdrop}" if backdrop else None,
    }


def pick_trailer(videos):
    """URL of the first YouTube trailer in a TMDB videos payload, or None"""
    for video in videos.get('results', []):
        if video.get('type') == 'Trailer' and video.get('site') == 'YouTube':
            return f"{YOUTUBE_WATCH_URL}{video['key']}"
    return None


def to_detail(details, videos, images):
    return {
        'id': details.get('id'),
        'title': details.get('title'),
        'rating': details.get('vote_average'),
        'description': details.get('overview'),
        'trailerUrl': pick_trailer(videos),
        'images': images.get('backdrops', [])[:MAX_DETAIL_IMAGES],
    }


class MovieService:
    def __init__(self, tmdb, image_base_url=IMAGE_BASE_URL, rng=None):
        self.tmdb = tmdb
        self.image_base_url = image_base_url
        self.rng = rng or random.SystemRandom()

    def _summaries(self, movies):
        return [to_summary(m, self.image_base_url) for m in movies]

    def random_movies(self):
        """10 summaries from a random page of the popular list, in random order"""
        page = self.rng.randint(1, RANDOM_PAGES)
        movies = list(self.tmdb.movie_list('popular', page))
        self.rng.shuffle(movies)
        return self._summaries(movies[:RANDOM_COUNT])

    def list_movies(self, category, page=1):
        if category not in MOVIE_LISTS:
            raise NotFoundError('Movie list not found')
        if page < 1 or page > MAX_PAGE:
            raise ValidationError(f"page must be between 1 and {MAX_PAGE}")
        return self._summaries(self.tmdb.movie_list(category, page))

    def movie_detail(self, movie_id):
        """
        Details, videos and images fetched in parallel and merged.

        All three calls must succeed; the first failure is re-raised
        without waiting for the calls still in flight.
        """
        executor = ThreadPoolExecutor(max_workers=3)
        try:
            futures = [
                executor.submit(self.tmdb.movie_details, movie_id),
                executor.submit(self.tmdb.movie_videos, movie_id),
                executor.submit(self.tmdb.movie_images, movie_id),
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                if future.exception() is not None:
                    raise future.exception()
            details, videos, images = (f.result() for f in futures)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return to_detail(details, videos, images)

    def movie_detail_by_name(self, name):
        results = self.tmdb.search_movies(name)
        if not results:
            logger.info("No search results for '%s'", name)
            raise NotFoundError('Movie not found')
        # Upstream relevance order is trusted as-is
        movie_id = results[0]['id']
        logger.info("Resolved '%s' to movie %s", name, movie_id)
        return self.movie_detail(movie_id)
