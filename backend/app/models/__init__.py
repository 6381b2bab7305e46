from app.models.contact import Contact

__all__ = [
    "Contact",
]
