"""Database configuration and initialization."""
from sqlalchemy import create_engine, BigInteger, Integer
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _engine_options(database_uri, echo):
    """Build create_engine kwargs for the configured backend."""
    if database_uri.startswith('sqlite'):
        # In-memory SQLite must share one connection across the scoped session
        return {
            'echo': echo,
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False},
        }
    return {
        'echo': echo,
        'pool_pre_ping': True,  # Enable connection health checks
        'pool_size': 10,
        'max_overflow': 20,
    }


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = create_engine(
        database_uri,
        **_engine_options(database_uri, app.config.get('SQLALCHEMY_ECHO', False))
    )

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every table registered on Base (used by CLI and tests)."""
    import app.models  # noqa: F401  (register mappers)
    Base.metadata.create_all(bind=engine)


def drop_all():
    """Drop every table registered on Base."""
    Base.metadata.drop_all(bind=engine)


def get_session():
    """Get database session."""
    return db_session


# BigInteger primary keys only autoincrement on SQLite when declared as INTEGER
BigIntPK = BigInteger().with_variant(Integer(), 'sqlite')
