"""
Message Bus

Commands go to exactly one handler and return its result. Events are
fanned out to their subscribers once the unit of work has committed.
"""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:

    def __init__(self):
        self._commands: Dict[Type, Callable[[Any], Any]] = {}
        self._subscribers: DefaultDict[Type[DomainEvent], List[Callable]] = defaultdict(list)

    def register_command_handler(self, command_type: Type, handler: Callable[[Any], Any]):
        if command_type in self._commands:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._commands[command_type] = handler

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._commands

    def subscribe(self, event_type: Type[DomainEvent], handler: Callable[[DomainEvent], None]):
        """Add a subscriber; subscribing the same handler twice is a no-op"""
        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)

    def handle_command(self, command: Any) -> Any:
        handler = self._commands.get(type(command))
        if handler is None:
            raise ValueError(f"No handler registered for command {type(command).__name__}")
        logger.debug(f"Handling command: {type(command).__name__}")
        return handler(command)

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Deliver events to their subscribers

        A failing subscriber is logged and skipped; the booking it reacts
        to has already been committed.
        """
        for event in events:
            for handler in self._subscribers.get(type(event), ()):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"Subscriber {getattr(handler, '__name__', handler)} failed on "
                        f"{type(event).__name__} {event.event_id}"
                    )


message_bus = MessageBus()
