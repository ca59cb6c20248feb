"""
Factory Boy factories for tenant test data.

The session is attached by the ``db_session`` fixture; factories commit so
that the service under test sees the rows through its own session.
"""

import factory

from tenant_migration_core.db import Tenant


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory with common patterns."""

    class Meta:
        abstract = True
        sqlalchemy_session_persistence = "commit"


class TenantFactory(BaseFactory):
    """Factory for creating test tenants."""

    class Meta:
        model = Tenant

    slug = factory.Sequence(lambda n: f"tenant-{n}")
    name = factory.Faker("company")
    region = "eu"
    settings = factory.LazyFunction(lambda: {"plan": "standard"})
