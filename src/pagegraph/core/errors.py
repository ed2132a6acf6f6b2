"""Exceptions raised by the page index."""


class PageGraphError(Exception):
    """Base class for all pagegraph errors."""


class NotFoundError(PageGraphError):
    """A named project or page does not exist."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_name: str):
        self.project_name = project_name
        super().__init__(f"Project {project_name} not found")


class PageNotFoundError(NotFoundError):
    def __init__(self, page_title: str, project_name: str | None = None):
        self.page_title = page_title
        self.project_name = project_name
        if project_name:
            message = f"Page {page_title} not found in project {project_name}"
        else:
            message = f"Page {page_title} not found"
        super().__init__(message)


class SourceUnavailableError(PageGraphError):
    """Raw page data could not be fetched, read or parsed."""

    def __init__(self, source: str, reason: str | None = None):
        self.source = source
        self.reason = reason
        message = f"Source unavailable: {source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
