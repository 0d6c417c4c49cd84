from sqlalchemy.orm import declarative_base

# Table definitions for the hosted Postgres. The application itself reaches
# these tables through the REST gateway; the metadata drives Alembic.
Base = declarative_base()
