import os
import logging

from contextlib import contextmanager


def get_handlers():
    """Obtain pointers to all StreamHandlers."""
    handlers = {}

    rootlogger = logging.getLogger()
    for h in rootlogger.handlers:
        if isinstance(h, logging.StreamHandler):
            handlers[h.name] = h

    for logger in logging.Logger.manager.loggerDict.values():
        if not isinstance(logger, logging.PlaceHolder):
            for h in logger.handlers:
                if isinstance(h, logging.StreamHandler):
                    handlers[h.name] = h

    return handlers


@contextmanager
def less_console_noise():
    """
    Context manager to use in tests to silence console logging.

    This is helpful on tests which trigger console messages
    (such as errors) which are normal and expected.

    It can easily be removed to debug a failing test.
    """
    restore = {}
    handlers = get_handlers()
    devnull = open(os.devnull, "w")

    # redirect all the streams
    for handler in handlers.values():
        prior = handler.setStream(devnull)
        restore[handler.name] = prior
    try:
        yield
    finally:
        for handler in handlers.values():
            handler.setStream(restore[handler.name])
        devnull.close()


def less_console_noise_decorator(func):
    """
    Decorator to silence console logging using the less_console_noise() function.
    """

    def wrapper(*args, **kwargs):
        with less_console_noise():
            return func(*args, **kwargs)

    return wrapper


def valid_contact(**overrides):
    """A contact that passes validation once normalized. Fields can be overridden."""
    contact = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "+12025551234",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
        "country": "US",
    }
    contact.update(overrides)
    return contact


def registrar_envelope(result=None, success=True, errors=None):
    """The JSON body every registrar API response is wrapped in"""
    return {"success": success, "errors": errors or [], "messages": [], "result": result}
