# authguard/adapters/outbound/persistence/models/base_model.py

from sqlalchemy.orm import declarative_base

Base = declarative_base()
