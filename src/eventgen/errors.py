"""
Engine Errors

Exceptions raised by template validation and generation.
"""
from typing import Optional
from uuid import UUID


class TemplateValidationError(ValueError):
    """A recurring event template is malformed for its recurrence type"""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class TemplateNotFoundError(LookupError):
    """No recurring event template exists with the given ID"""

    def __init__(self, template_id: Optional[UUID]):
        super().__init__(f"Recurring event {template_id} not found")
        self.template_id = template_id
