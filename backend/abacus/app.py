from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from abacus.logic.timer import CooldownConfig, ModeSwitchCooldown
from abacus.messaging.router import EventRouter
from abacus.session.controller import MatchController
from abacus.session.history import KeyValueHistoryRepository
from abacus.session.preferences import PreferencesRepository
from abacus.settings import AbacusSettings
from shared.logging import setup_logging
from shared.storage import InMemoryStorage, JsonFileStorage

if TYPE_CHECKING:
    from shared.storage import KeyValueStorage

logger = structlog.get_logger()


@dataclass(frozen=True)
class AbacusApp:
    settings: AbacusSettings
    storage: KeyValueStorage
    controller: MatchController
    router: EventRouter


def _build_storage(settings: AbacusSettings) -> KeyValueStorage:
    if settings.persist_in_memory:
        return InMemoryStorage()
    return JsonFileStorage(settings.storage_path)


def create_app(
    settings: AbacusSettings | None = None,
    storage: KeyValueStorage | None = None,
) -> AbacusApp:
    if settings is None:
        settings = AbacusSettings()

    if storage is None:
        storage = _build_storage(settings)

    cooldown = ModeSwitchCooldown(CooldownConfig(seconds=settings.mode_switch_cooldown_seconds))
    controller = MatchController(
        history=KeyValueHistoryRepository(storage),
        preferences=PreferencesRepository(storage),
        cooldown=cooldown,
    )
    router = EventRouter(controller)

    logger.info("abacus ready", phase=controller.phase, in_memory=settings.persist_in_memory)
    return AbacusApp(settings=settings, storage=storage, controller=controller, router=router)


def get_app() -> AbacusApp:
    """Application factory for production use: configures logging, then wires everything."""
    settings = AbacusSettings()
    log_file = setup_logging(settings.log_dir)
    logger.info("logging configured", log_file=str(log_file))
    return create_app(settings=settings)
