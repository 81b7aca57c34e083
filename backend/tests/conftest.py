import os, sys, pytest
# Ensure backend directory is on path so 'wkshop' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from sqlalchemy import delete
from wkshop import create_app, get_db
from wkshop.models.permission import Base
# Import all model modules to ensure tables are registered before create_all
import wkshop.models.account  # noqa: F401
import wkshop.models.purchase_order  # noqa: F401
import wkshop.models.audit  # noqa: F401

@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'TESTING': True})
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app

@pytest.fixture(autouse=True)
def clean_tables(app_instance):
    yield
    # Each test starts from empty tables and a cold permission cache
    with app_instance.app_context():
        session = get_db()
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(delete(table))
        session.commit()
        app_instance.extensions['wkshop']['permission_service'].invalidate()

@pytest.fixture()
def app_context(app_instance):
    with app_instance.app_context():
        yield app_instance

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
