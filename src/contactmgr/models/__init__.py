from .contact_template import ContactTemplate

__all__ = [
    "ContactTemplate",
]
