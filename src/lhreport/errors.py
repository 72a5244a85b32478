"""
Error taxonomy for report rendering.

Template and element lookups are structural defects: they propagate to the
caller. The Malformed* errors are per-item data defects and are caught by the
loop that renders the item.
"""


class ReportRenderError(Exception):
    """Base class for all rendering errors."""


class TemplateNotFound(ReportRenderError):
    def __init__(self, selector: str):
        super().__init__(f"Template not found: template{selector}")
        self.selector = selector


class ElementNotFound(ReportRenderError):
    def __init__(self, selector: str):
        super().__init__(f"Element not found: {selector}")
        self.selector = selector


class MalformedDetail(ReportRenderError):
    """An audit's details value has an unknown or invalid shape."""


class MalformedAudit(ReportRenderError):
    """An audit entry could not be read as an Audit."""


class MalformedCategory(ReportRenderError):
    """A category entry could not be read as a Category."""
