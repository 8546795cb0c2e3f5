import logging

from flask import Flask, g
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config import settings as default_settings
from cyclic_events import start_scheduler
from definitions import Base
from loans import LoanWorkflow
from routes import routes_blueprint
from store import LibraryStore

logger = logging.getLogger(__name__)


def create_app(settings=None, engine=None):
    """Build the Flask app around its own engine and session factory.

    ``engine`` lets callers (tests) supply a ready engine instead of the one
    named by ``settings.database_url``.
    """
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level)

    if engine is None:
        engine = create_engine(settings.database_url, echo=settings.sql_echo)
    Base.metadata.create_all(engine)
    for table_name in Base.metadata.tables:
        logger.info("Loaded table: %s", table_name)

    session_factory = sessionmaker(bind=engine)

    app = Flask(__name__)

    @app.before_request
    def create_session():
        g.db = session_factory()
        g.store = LibraryStore(g.db)
        g.workflow = LoanWorkflow(g.store)

    @app.teardown_request
    def close_session(exception=None):
        db = g.pop('db', None)
        if db is not None:
            db.close()

    app.register_blueprint(routes_blueprint)

    if settings.scheduler_enabled:
        app.extensions['scheduler'] = start_scheduler(session_factory, settings)

    return app


if __name__ == '__main__':
    create_app().run()
