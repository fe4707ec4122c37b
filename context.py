"""
Application context: configuration plus the collaborators every route needs.
Built once from the environment, or assembled by hand in tests.
"""

import os

from dotenv import load_dotenv
from pymongo import MongoClient

from accounts import AccountService
from movies import MovieService
from tmdb import TMDBClient

DEFAULT_PORT = 3001


class AppContext:
    def __init__(self, users_collection, tmdb, jwt_secret, port=DEFAULT_PORT):
        self.users_collection = users_collection
        self.tmdb = tmdb
        self.jwt_secret = jwt_secret
        self.port = port
        self.movies = MovieService(tmdb)
        self.accounts = AccountService(users_collection)

    @classmethod
    def from_env(cls):
        load_dotenv()

        client = MongoClient(os.getenv('MONGO_URI', 'mongodb://localhost:27017/'))
        db = client[os.getenv('MONGO_DB', 'movie_proxy')]

        return cls(
            users_collection=db['users'],
            tmdb=TMDBClient.from_env(),
            jwt_secret=os.getenv('JWT_SECRET_KEY', 'super-secret-key-please-change'),
            port=int(os.getenv('PORT', DEFAULT_PORT)),
        )
