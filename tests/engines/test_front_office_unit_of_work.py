"""
Front Office Engine — Unit of Work Tests
=======================================
Cycle: collect → commit → dispatch → clear.

Tests verify:
- Events are dispatched only when the outermost block exits cleanly
- A failed block dispatches nothing and leaves the buffers in place
- DjangoUnitOfWork dispatches after the database commit
"""

import pytest
from django.db import transaction

from adapters.django_orm import DjangoUnitOfWork
from core.events import SubscriberRegistry
from engines.front_office.customer import Customer
from engines.front_office.events import CustomerRegistered
from engines.front_office.unit_of_work import BestEffortUnitOfWork


class Boom(Exception):
    pass


@pytest.fixture
def registry_and_log():
    registry = SubscriberRegistry()
    heard = []
    registry.register_subscriber(CustomerRegistered, heard.append, "crm")
    return registry, heard


# ══════════════════════════════════════════════════════════════
# BEST EFFORT
# ══════════════════════════════════════════════════════════════

class TestBestEffortUnitOfWork:
    def test_dispatches_on_clean_exit(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = BestEffortUnitOfWork(registry)
        customer = Customer(make_contact())

        with uow.atomic():
            uow.collect(customer)
            assert heard == []
            assert uow.in_progress

        assert len(heard) == 1
        assert not customer.has_domain_events
        assert not uow.in_progress
        assert uow.last_results[0].subscribers_notified == 1

    def test_nested_blocks_dispatch_once_at_outermost(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = BestEffortUnitOfWork(registry)
        first = Customer(make_contact())
        second = Customer(make_contact(email="joao@example.com"))

        with uow.atomic():
            with uow.atomic():
                uow.collect(first)
            assert heard == []
            uow.collect(second, first)

        assert [e.customer_id for e in heard] == [first.id, second.id]

    def test_failure_dispatches_nothing(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = BestEffortUnitOfWork(registry)
        customer = Customer(make_contact())

        with pytest.raises(Boom):
            with uow.atomic():
                uow.collect(customer)
                raise Boom()

        assert heard == []
        assert customer.has_domain_events
        assert not uow.in_progress

    def test_collection_reset_after_failure(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = BestEffortUnitOfWork(registry)
        failed = Customer(make_contact())

        with pytest.raises(Boom):
            with uow.atomic():
                uow.collect(failed)
                raise Boom()

        fresh = Customer(make_contact(email="joao@example.com"))
        with uow.atomic():
            uow.collect(fresh)

        assert [e.customer_id for e in heard] == [fresh.id]

    def test_none_ignored(self, make_contact):
        uow = BestEffortUnitOfWork(SubscriberRegistry())
        customer = Customer(make_contact())
        with uow.atomic():
            uow.collect(customer, None)
        assert not customer.has_domain_events

    def test_without_registry_events_stay_buffered(self, make_contact):
        uow = BestEffortUnitOfWork()
        customer = Customer(make_contact())
        with uow.atomic():
            uow.collect(customer)
        assert customer.has_domain_events
        assert uow.last_results == []

    def test_failed_inner_block_forgets_its_aggregates(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = BestEffortUnitOfWork(registry)
        kept = Customer(make_contact())
        failed = Customer(make_contact(email="joao@example.com"))

        with uow.atomic():
            uow.collect(kept)
            with pytest.raises(Boom):
                with uow.atomic():
                    uow.collect(failed)
                    raise Boom()

        assert [e.customer_id for e in heard] == [kept.id]
        assert failed.has_domain_events


# ══════════════════════════════════════════════════════════════
# DJANGO TRANSACTION
# ══════════════════════════════════════════════════════════════

@pytest.mark.django_db(transaction=True)
class TestDjangoUnitOfWork:
    def test_dispatches_after_commit(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = DjangoUnitOfWork(registry)
        customer = Customer(make_contact())

        with uow.atomic():
            uow.collect(customer)
            assert heard == []

        assert len(heard) == 1
        assert not customer.has_domain_events

    def test_rollback_dispatches_nothing(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = DjangoUnitOfWork(registry)
        customer = Customer(make_contact())

        with pytest.raises(Boom):
            with uow.atomic():
                uow.collect(customer)
                raise Boom()

        assert heard == []
        assert customer.has_domain_events

    def test_outer_transaction_defers_dispatch(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = DjangoUnitOfWork(registry)
        customer = Customer(make_contact())

        with transaction.atomic():
            with uow.atomic():
                uow.collect(customer)
            assert heard == []

        assert len(heard) == 1

    def test_rolled_back_savepoint_dispatches_nothing(self, registry_and_log, make_contact):
        registry, heard = registry_and_log
        uow = DjangoUnitOfWork(registry)
        kept = Customer(make_contact())
        failed = Customer(make_contact(email="joao@example.com"))

        with uow.atomic():
            uow.collect(kept)
            with pytest.raises(Boom):
                with uow.atomic():
                    uow.collect(failed)
                    raise Boom()

        assert [e.customer_id for e in heard] == [kept.id]
        assert failed.has_domain_events

    def test_subscriber_failure_does_not_escape(self, make_contact):
        registry = SubscriberRegistry()

        def boom(event):
            raise RuntimeError("crm down")

        registry.register_subscriber(CustomerRegistered, boom, "crm")
        uow = DjangoUnitOfWork(registry)
        customer = Customer(make_contact())

        with uow.atomic():
            uow.collect(customer)

        assert not customer.has_domain_events
