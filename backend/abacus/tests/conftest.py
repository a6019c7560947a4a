import pytest

from abacus.logic.enums import MatchMode
from abacus.messaging.router import EventRouter
from abacus.tests.helpers.builders import create_controller
from shared.storage import InMemoryStorage


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def controller(storage):
    return create_controller(storage)


@pytest.fixture
def pairs_controller(controller):
    controller.select_match_mode(MatchMode.PAIRS_2)
    return controller


@pytest.fixture
def event_router(controller):
    return EventRouter(controller)
