import pytest
import requests

import tmdb
from errors import UpstreamError
from tmdb import TMDBClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {}

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self.payload


@pytest.fixture
def recorded(monkeypatch):
    calls = []
    state = {'response': FakeResponse(payload={'results': []})}

    def fake_get(url, params=None, timeout=None):
        calls.append({'url': url, 'params': params, 'timeout': timeout})
        if isinstance(state['response'], Exception):
            raise state['response']
        return state['response']

    monkeypatch.setattr(tmdb.requests, 'get', fake_get)
    return calls, state


def test_fetch_injects_api_key_and_default_language(recorded):
    calls, _ = recorded
    client = TMDBClient('key123')

    client.fetch('/movie/popular', {'page': 3})

    assert calls[0]['url'] == 'https://api.themoviedb.org/3/movie/popular'
    assert calls[0]['params'] == {'page': 3, 'api_key': 'key123', 'language': 'es-MX'}
    assert calls[0]['timeout'] == tmdb.DEFAULT_TIMEOUT


def test_fetch_language_override_and_omission(recorded):
    calls, _ = recorded
    client = TMDBClient('key123')

    client.fetch('/search/movie', {'query': 'x'}, language='en-US')
    client.movie_images(550)

    assert calls[0]['params']['language'] == 'en-US'
    assert calls[1]['url'].endswith('/movie/550/images')
    assert 'language' not in calls[1]['params']


def test_non_2xx_raises_upstream_error_with_status(recorded):
    _, state = recorded
    state['response'] = FakeResponse(status_code=401, payload={'status_message': 'bad key'})

    with pytest.raises(UpstreamError) as exc_info:
        TMDBClient('bad').movie_details(1)

    assert exc_info.value.status == 401


def test_network_failure_raises_upstream_error_without_status(recorded):
    _, state = recorded
    state['response'] = requests.ConnectionError('connection refused')

    with pytest.raises(UpstreamError) as exc_info:
        TMDBClient('key').movie_list('popular')

    assert exc_info.value.status is None


def test_movie_list_maps_category_to_path(recorded):
    calls, state = recorded
    state['response'] = FakeResponse(payload={'results': [{'id': 1}]})
    client = TMDBClient('key')

    assert client.movie_list('top', page=2) == [{'id': 1}]
    client.movie_list('playing')

    assert calls[0]['url'].endswith('/movie/top_rated')
    assert calls[0]['params']['page'] == 2
    assert calls[1]['url'].endswith('/movie/now_playing')


def test_from_env(monkeypatch):
    monkeypatch.setenv('TMDB_API_KEY', 'envkey')
    monkeypatch.setenv('TMDB_LANGUAGE', 'en-US')
    monkeypatch.setenv('TMDB_TIMEOUT', '3')

    client = TMDBClient.from_env()

    assert client.api_key == 'envkey'
    assert client.language == 'en-US'
    assert client.timeout == 3.0
