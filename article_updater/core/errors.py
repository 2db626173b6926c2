"""Exceptions raised by the article updater."""


class ArticleUpdaterError(Exception):
    """Base exception for the article updater."""

    pass


class FetchFailure(ArticleUpdaterError):
    """Raised when a page or search endpoint cannot be fetched."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"Fetch failed for {url}: {message}")


class ParseFailure(ArticleUpdaterError):
    """Raised when HTML cannot be parsed into a document."""

    pass


class InsufficientReferences(ArticleUpdaterError):
    """Raised when fewer than two qualifying references were found."""

    def __init__(self, query: str, found: int):
        self.query = query
        self.found = found
        super().__init__(f"Insufficient reference articles for '{query}': found {found}")


class RewriteFailure(ArticleUpdaterError):
    """Raised when every rewrite tier, including the fallback, produced nothing."""

    pass


class StoreFailure(ArticleUpdaterError):
    """Raised when the article store rejects a request."""

    def __init__(self, status_code: int | None, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Store error {status_code}: {message}")
