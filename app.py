from flask import Flask
from flask_cors import CORS
from flask_restful import Api, Resource
from flask_migrate import Migrate
from models import db
from config import Config
import logging

migrate = Migrate()


class HealthCheck(Resource):
    def get(self):
        return {"status": "ok"}


def create_app(config_object=Config, repository=None, profile_resolver=None):
    """
    Build the API.

    The swipe repository and profile resolver default to the SQL-backed
    implementations; tests and scripts may inject their own.
    """
    from repositories import SqlSwipeRepository, EXTENSION_KEY as REPOSITORY_KEY
    from utils.profiles import SqlProfileResolver, EXTENSION_KEY as RESOLVER_KEY
    from utils.cache import init_cache

    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s %(message)s'
    )

    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)
    init_cache(app)

    app.extensions[REPOSITORY_KEY] = repository if repository is not None else SqlSwipeRepository()
    app.extensions[RESOLVER_KEY] = profile_resolver if profile_resolver is not None else SqlProfileResolver()

    from resources.swipes import SwipeBatchResource, SwipeHistoryResource
    from resources.match import UserMatchesResource

    api = Api(app)

    api.add_resource(HealthCheck, '/health')

    # Swipe routes
    api.add_resource(SwipeBatchResource, '/swipes')
    api.add_resource(SwipeHistoryResource, '/swipes/history')

    # Match routes
    api.add_resource(UserMatchesResource, '/matches')

    return app


if __name__ == '__main__':
    create_app().run(debug=True)
