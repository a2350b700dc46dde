import pytest

from apps.bookings.domain.entities import Requester, RequesterStatus, Resource
from apps.bookings.domain.memory import InMemoryBookingStore


@pytest.fixture
def camera():
    return Resource(id=1, type_id=10)


@pytest.fixture
def store(camera):
    return InMemoryBookingStore(resources=[camera])


@pytest.fixture
def approved():
    return Requester(id=100, status=RequesterStatus.APPROVED)


@pytest.fixture
def pending():
    return Requester(id=200, status=RequesterStatus.PENDING)
