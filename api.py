"""
Flask API for the movie catalog proxy
Forwards catalog requests to TMDB, reshapes the responses and keeps a
per-user list of favorite movies in MongoDB.
"""

import logging
from datetime import timedelta

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager, get_jwt_identity, jwt_required
from werkzeug.exceptions import HTTPException

from context import AppContext
from errors import ApiError, InvalidTokenError, MissingTokenError, ValidationError, error_response

logger = logging.getLogger(__name__)


def bearer_token():
    """Raw token from an `Authorization: Bearer <token>` header, or None"""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def create_app(context=None):
    context = context or AppContext.from_env()

    app = Flask(__name__)
    CORS(app)

    app.config['JWT_SECRET_KEY'] = context.jwt_secret
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(days=7)
    jwt = JWTManager(app)

    movies = context.movies
    accounts = context.accounts

    # ==========================================
    # ERROR HANDLING
    # ==========================================

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        body, status = error_response(error)
        if status >= 500:
            logger.error("%s on %s: %s", type(error).__name__, request.path, error)
        return jsonify(body), status

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception("Unhandled error on %s", request.path)
        body, status = error_response(ApiError())
        return jsonify(body), status

    @jwt.unauthorized_loader
    def missing_token(reason):
        body, status = error_response(MissingTokenError())
        return jsonify(body), status

    @jwt.invalid_token_loader
    def invalid_token(reason):
        body, status = error_response(InvalidTokenError())
        return jsonify(body), status

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        body, status = error_response(InvalidTokenError())
        return jsonify(body), status

    # ==========================================
    # MOVIE ROUTES
    # ==========================================

    @app.route('/api/movies/random', methods=['GET'])
    def get_random_movies():
        """10 random movies from the popular list"""
        return jsonify(movies.random_movies())

    @app.route('/api/movies/<any(popular, top, upcoming, playing):category>', methods=['GET'])
    def get_movie_list(category):
        """One page of a TMDB movie list, projected to summaries"""
        try:
            page = int(request.args.get('page', 1))
        except ValueError:
            raise ValidationError('page must be an integer')
        return jsonify(movies.list_movies(category, page))

    @app.route('/api/movies/<int:movie_id>', methods=['GET'])
    def get_movie_by_id(movie_id):
        """Movie details with trailer and up to 5 backdrops"""
        return jsonify(movies.movie_detail(movie_id))

    @app.route('/api/movie/<name>', methods=['GET'])
    def get_movie_by_name(name):
        """Movie details for the best TMDB search hit"""
        return jsonify(movies.movie_detail_by_name(name))

    # ==========================================
    # AUTHENTICATION & USER ROUTES
    # ==========================================

    @app.route('/api/auth/register', methods=['POST'])
    def register():
        data = request.get_json(silent=True) or {}
        user = accounts.register(data.get('email'), data.get('password'))
        return jsonify({
            'email': user['email'],
            'password': user['password'].decode('utf-8'),
            'favorites': user['favorites'],
        }), 201

    @app.route('/api/auth/login', methods=['POST'])
    def login():
        data = request.get_json(silent=True) or {}
        return jsonify(accounts.login(data.get('email'), data.get('password'))), 200

    @app.route('/api/auth/verify', methods=['GET'])
    def verify():
        user_id = accounts.verify_session(bearer_token())
        return jsonify({'loggedIn': True, 'userId': user_id}), 200

    @app.route('/api/user/favoritos', methods=['GET'])
    @jwt_required()
    def get_favorites():
        return jsonify({'favoritos': accounts.favorites(get_jwt_identity())}), 200

    @app.route('/api/user/favoritos', methods=['PUT'])
    @jwt_required()
    def add_favorite():
        data = request.get_json(silent=True) or {}
        if data.get('movieId') is None:
            raise ValidationError('Missing movieId')
        favorites = accounts.add_favorite(get_jwt_identity(), data['movieId'])
        return jsonify({'favoritos': favorites}), 200

    @app.route('/api/user/favoritos', methods=['DELETE'])
    @jwt_required()
    def remove_favorite():
        data = request.get_json(silent=True) or {}
        if data.get('movieId') is None:
            raise ValidationError('Missing movieId')
        favorites = accounts.remove_favorite(get_jwt_identity(), data['movieId'])
        return jsonify({'favoritos': favorites}), 200

    @app.route('/api/user/verificar/<int:movie_id>', methods=['GET'])
    @jwt_required()
    def check_favorite(movie_id):
        return jsonify({'existe': accounts.has_favorite(get_jwt_identity(), movie_id)}), 200

    return app


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    context = AppContext.from_env()
    context.accounts.ensure_indexes()
    app = create_app(context)
    print("\n" + "🎬" * 20)
    print("  Movie Catalog Proxy API")
    print("🎬" * 20)
    print(f"\n🚀 Starting server at http://localhost:{context.port}")
    print("=" * 50 + "\n")
    app.run(debug=False, port=context.port)
