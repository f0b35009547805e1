"""Editorial articles and their "see also" relations."""

from mutuals.domain.articles.repository import ArticleFilters
from mutuals.domain.articles.service import ArticleService

__all__ = ["ArticleFilters", "ArticleService"]
