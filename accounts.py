"""
User accounts: registration, login, session tokens and favorite movies
Users live in a MongoDB collection; favorites are a list of TMDB movie ids.
"""

import logging

import bcrypt
from bson.errors import InvalidId
from bson.objectid import ObjectId
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from pymongo.errors import DuplicateKeyError

from errors import (
    DuplicateEmailError,
    InvalidCredentialError,
    InvalidTokenError,
    MissingTokenError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def normalize_email(email):
    return (email or '').strip().lower()


def parse_credentials(email, password):
    """Normalized email and password from a request body"""
    for value in (email, password):
        if value is not None and not isinstance(value, str):
            raise ValidationError('Email and password must be strings')
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError('Email and password are required')
    return email, password


def parse_movie_id(value):
    """Movie ids are compared as ints everywhere"""
    if isinstance(value, bool):
        raise ValidationError('Invalid movieId')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError('Invalid movieId')


class AccountService:
    def __init__(self, users_collection):
        self.users = users_collection

    def ensure_indexes(self):
        self.users.create_index('email', unique=True)

    # ------------------------------------------------------------------
    # Registration / login
    # ------------------------------------------------------------------
    def register(self, email, password):
        email, password = parse_credentials(email, password)

        if self.users.find_one({'email': email}):
            raise DuplicateEmailError()

        hashed_password = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        new_user = {
            'email': email,
            'password': hashed_password,
            'favorites': [],
        }
        try:
            result = self.users.insert_one(new_user)
        except DuplicateKeyError:
            # Lost the race against a concurrent registration
            raise DuplicateEmailError()
        new_user['_id'] = result.inserted_id

        logger.info("Registered user %s", new_user['_id'])
        return new_user

    def login(self, email, password):
        """Token plus current favorites; the stored user is never modified"""
        email, password = parse_credentials(email, password)

        user = self.users.find_one({'email': email})
        if not user:
            raise NotFoundError('User not found')

        if not bcrypt.checkpw(password.encode('utf-8'), user['password']):
            raise InvalidCredentialError()

        token = create_access_token(identity=str(user['_id']))
        logger.info("User %s logged in", user['_id'])
        return {
            'token': token,
            'email': user['email'],
            'favorites': [int(f) for f in user.get('favorites', [])],
        }

    def verify_session(self, token):
        """User id bound to a session token"""
        if not token:
            raise MissingTokenError()
        try:
            decoded = decode_token(token)
        except (PyJWTError, JWTExtendedException) as e:
            logger.info("Rejected session token: %s", e)
            raise InvalidTokenError()
        return decoded['sub']

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------
    def _get_user(self, user_id):
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            raise UserNotFoundError()
        user = self.users.find_one({'_id': oid})
        if not user:
            raise UserNotFoundError()
        return user

    def _save_favorites(self, user, favorites):
        # Whole-list write: concurrent updates to one user are last-write-wins
        self.users.update_one({'_id': user['_id']}, {'$set': {'favorites': favorites}})
        return favorites

    def favorites(self, user_id):
        user = self._get_user(user_id)
        return [int(f) for f in user.get('favorites', [])]

    def add_favorite(self, user_id, movie_id):
        movie_id = parse_movie_id(movie_id)
        user = self._get_user(user_id)
        favorites = [int(f) for f in user.get('favorites', [])]
        if movie_id in favorites:
            return favorites
        favorites.append(movie_id)
        return self._save_favorites(user, favorites)

    def remove_favorite(self, user_id, movie_id):
        movie_id = parse_movie_id(movie_id)
        user = self._get_user(user_id)
        favorites = [int(f) for f in user.get('favorites', [])]
        if movie_id not in favorites:
            return favorites
        return self._save_favorites(user, [f for f in favorites if f != movie_id])

    def has_favorite(self, user_id, movie_id):
        movie_id = parse_movie_id(movie_id)
        return movie_id in self.favorites(user_id)
