import mongomock
import pytest

from api import create_app
from context import AppContext
from errors import UpstreamError

JWT_SECRET = 'test-secret-key-that-is-long-enough-for-hs256'


def make_movie(movie_id, backdrop=True):
    return {
        'id': movie_id,
        'title': f"Movie {movie_id}",
        'backdrop_path': f"/backdrop{movie_id}.jpg" if backdrop else None,
        'vote_average': 7.5,
        'overview': f"Overview {movie_id}",
    }


class FakeTMDB:
    """In-memory stand-in for TMDBClient"""

    def __init__(self):
        self.pages = {}
        self.default_page = [make_movie(i) for i in range(1, 21)]
        self.videos = {'results': []}
        self.images = {'backdrops': []}
        self.search_results = []
        self.failing = set()
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.failing:
            raise UpstreamError(status=503)

    def movie_list(self, category, page=1):
        self._call('movie_list', category, page)
        return list(self.pages.get((category, page), self.default_page))

    def movie_details(self, movie_id):
        self._call('movie_details', movie_id)
        return make_movie(movie_id)

    def movie_videos(self, movie_id):
        self._call('movie_videos', movie_id)
        return self.videos

    def movie_images(self, movie_id):
        self._call('movie_images', movie_id)
        return self.images

    def search_movies(self, query):
        self._call('search_movies', query)
        return list(self.search_results)


@pytest.fixture
def tmdb():
    return FakeTMDB()


@pytest.fixture
def users_collection():
    return mongomock.MongoClient().db.users


@pytest.fixture
def context(tmdb, users_collection):
    return AppContext(users_collection=users_collection, tmdb=tmdb, jwt_secret=JWT_SECRET)


@pytest.fixture
def app(context):
    context.accounts.ensure_indexes()
    app = create_app(context)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def accounts(app, context):
    with app.app_context():
        yield context.accounts


@pytest.fixture
def auth_headers(client):
    client.post('/api/auth/register', json={'email': 'a@x.com', 'password': 'secret'})
    token = client.post('/api/auth/login', json={'email': 'a@x.com', 'password': 'secret'}).get_json()['token']
    return {'Authorization': f"Bearer {token}"}
