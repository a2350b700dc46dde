"""Wires booking commands and events into the message bus."""

from shared.application.message_bus import message_bus


def bootstrap(bus=message_bus):
    from apps.bookings.application import command_handlers as commands
    from apps.bookings.application.event_handlers import EVENT_HANDLERS

    handlers = {
        commands.ValidateBookingCommand: commands.ValidateBookingHandler().handle,
        commands.SubmitBookingCommand: commands.SubmitBookingHandler().handle,
        commands.CancelBookingCommand: commands.CancelBookingHandler().handle,
    }
    for command_type, handler in handlers.items():
        if not bus.has_command_handler(command_type):
            bus.register_command_handler(command_type, handler)

    for event_type, subscribers in EVENT_HANDLERS.items():
        for subscriber in subscribers:
            bus.subscribe(event_type, subscriber)
    return bus
