"""Article endpoints.

Reads are public and cached; writes require an editorial role and purge
every cached article response.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from mutuals.api.cache import cache_response, invalidate_cache
from mutuals.api.dependencies import (
    CurrentIdentity,
    FieldRule,
    Format,
    ValidatedRequest,
    authenticate,
    require_roles,
    validate_request,
)
from mutuals.api.pagination import Pagination, parse_int
from mutuals.api.schemas import ERROR_RESPONSES, Envelope
from mutuals.api.utils.responses import (
    created_response,
    paginated_response,
    success_response,
)
from mutuals.core.constants import (
    MAX_PAGE_SIZE,
    ArticleStatus,
    HeroMediaType,
    UserRole,
)
from mutuals.domain.articles import ArticleFilters, ArticleService
from mutuals.domain.articles.service import DEFAULT_FEATURED_LIMIT
from mutuals.infrastructure.database import DatabaseSession

ARTICLES_CACHE_PATTERN = "cache:{api_prefix}/articles*"

ARTICLE_ID_RULE = FieldRule(
    "id", location="path", required=True, format=Format.UUID, error="Invalid article ID"
)

LIST_RULES = (
    FieldRule("category", location="query", trim=True),
    FieldRule("status", location="query", choices=tuple(ArticleStatus), error="Invalid status"),
    FieldRule(
        "featured", location="query", type="boolean", error="Featured must be a boolean"
    ),
    FieldRule("search", location="query", trim=True),
)

SLUG_RULES = (
    FieldRule("slug", location="path", required=True, trim=True, error="Slug is required"),
)

# Body fields shared by create and update
_OPTIONAL_BODY_RULES = (
    FieldRule(
        "subtitle",
        type="string",
        trim=True,
        max_length=500,
        error="Subtitle must not exceed 500 characters",
    ),
    FieldRule("description", type="string", trim=True),
    FieldRule("readTime", type="string", trim=True),
    FieldRule("excerpt", type="string", trim=True),
    FieldRule(
        "heroMediaUrl",
        type="string",
        trim=True,
        format=Format.URL,
        error="Hero media URL must be a valid URL",
    ),
    FieldRule(
        "heroMediaType",
        choices=tuple(HeroMediaType),
        error="Hero media type must be IMAGE or VIDEO",
    ),
    FieldRule("tags", type="array", error="Tags must be an array"),
    FieldRule("status", choices=tuple(ArticleStatus), error="Invalid status"),
    FieldRule(
        "publishDate",
        type="string",
        format=Format.ISO8601,
        error="Publish date must be a valid date",
    ),
    FieldRule("featured", type="boolean", error="Featured must be a boolean"),
)

CREATE_RULES = (
    FieldRule(
        "title",
        required=True,
        type="string",
        trim=True,
        max_length=255,
        error="Title is required",
        messages={"max_length": "Title must not exceed 255 characters"},
    ),
    FieldRule(
        "content", required=True, type="string", trim=True, error="Content is required"
    ),
    FieldRule(
        "category", required=True, type="string", trim=True, error="Category is required"
    ),
    *_OPTIONAL_BODY_RULES,
)

UPDATE_RULES = (
    ARTICLE_ID_RULE,
    FieldRule(
        "title",
        type="string",
        trim=True,
        min_length=1,
        max_length=255,
        error="Title cannot be empty",
        messages={"max_length": "Title must not exceed 255 characters"},
    ),
    FieldRule(
        "content", type="string", trim=True, min_length=1, error="Content cannot be empty"
    ),
    FieldRule(
        "category", type="string", trim=True, min_length=1, error="Category cannot be empty"
    ),
    *_OPTIONAL_BODY_RULES,
)

RELATED_RULES = (
    FieldRule(
        "articleId",
        location="path",
        required=True,
        format=Format.UUID,
        error="Invalid article ID",
    ),
    FieldRule(
        "relatedArticleId",
        location="path",
        required=True,
        format=Format.UUID,
        error="Invalid related article ID",
    ),
)

router = APIRouter(prefix="/articles", tags=["articles"], responses=ERROR_RESPONSES)


def get_article_service(db: DatabaseSession) -> ArticleService:
    return ArticleService(db)


ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]


@router.get("", response_model=Envelope)
@cache_response()
async def list_articles(
    request: Request,
    pagination: Pagination,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*LIST_RULES))],
    service: ArticleServiceDep,
) -> Response:
    """Published articles, newest first, with optional filters."""
    query = validated.query
    filters = ArticleFilters(
        category=query.get("category") or None,
        status=ArticleStatus(query.get("status", ArticleStatus.PUBLISHED)),
        featured=query.get("featured"),
        search=query.get("search") or None,
    )
    articles, total = await service.list_articles(
        filters, pagination.offset, pagination.limit
    )
    return paginated_response(
        articles,
        total,
        pagination.page,
        pagination.limit,
        "Articles retrieved successfully",
    )


@router.get("/featured", response_model=Envelope)
@cache_response()
async def list_featured(request: Request, service: ArticleServiceDep) -> Response:
    raw_limit = parse_int(request.query_params.get("limit")) or DEFAULT_FEATURED_LIMIT
    limit = min(max(raw_limit, 1), MAX_PAGE_SIZE)
    articles = await service.list_featured(limit)
    return success_response(articles, "Featured articles retrieved successfully")


@router.get("/category/{category}", response_model=Envelope)
@cache_response()
async def list_by_category(
    request: Request,
    category: str,
    pagination: Pagination,
    service: ArticleServiceDep,
) -> Response:
    articles, total = await service.list_articles(
        ArticleFilters(category=category), pagination.offset, pagination.limit
    )
    return paginated_response(
        articles,
        total,
        pagination.page,
        pagination.limit,
        "Articles retrieved successfully",
    )


@router.get("/id/{id}", response_model=Envelope)
@cache_response()
async def get_article_by_id(
    request: Request,
    validated: Annotated[ValidatedRequest, Depends(validate_request(ARTICLE_ID_RULE))],
    service: ArticleServiceDep,
) -> Response:
    article = await service.get_by_id(uuid.UUID(validated.path["id"]))
    return success_response(article, "Article retrieved successfully")


@router.get("/{slug}", response_model=Envelope)
@cache_response()
async def get_article_by_slug(
    request: Request,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*SLUG_RULES))],
    service: ArticleServiceDep,
) -> Response:
    """Article page with related articles.

    A cache hit does not count as a view.
    """
    article = await service.get_by_slug(validated.path["slug"])
    return success_response(article, "Article retrieved successfully")


@router.post(
    "",
    status_code=201,
    response_model=Envelope,
    dependencies=[
        Depends(authenticate),
        Depends(
            require_roles(
                UserRole.SUPER_ADMIN,
                UserRole.ADMIN,
                UserRole.EDITOR,
                UserRole.CONTRIBUTOR,
            )
        ),
    ],
)
@invalidate_cache(ARTICLES_CACHE_PATTERN)
async def create_article(
    request: Request,
    identity: CurrentIdentity,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*CREATE_RULES))],
    service: ArticleServiceDep,
) -> Response:
    article = await service.create(validated.body, author_id=uuid.UUID(identity.id))
    return created_response(article, "Article created successfully")


@router.put(
    "/{id}",
    response_model=Envelope,
    dependencies=[
        Depends(authenticate),
        Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.EDITOR)),
    ],
)
@invalidate_cache(ARTICLES_CACHE_PATTERN)
async def update_article(
    request: Request,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*UPDATE_RULES))],
    service: ArticleServiceDep,
) -> Response:
    article = await service.update(uuid.UUID(validated.path["id"]), validated.body)
    return success_response(article, "Article updated successfully")


@router.delete(
    "/{id}",
    response_model=Envelope,
    dependencies=[
        Depends(authenticate),
        Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN)),
    ],
)
@invalidate_cache(ARTICLES_CACHE_PATTERN)
async def delete_article(
    request: Request,
    validated: Annotated[ValidatedRequest, Depends(validate_request(ARTICLE_ID_RULE))],
    service: ArticleServiceDep,
) -> Response:
    result = await service.delete(uuid.UUID(validated.path["id"]))
    return success_response(result, "Article deleted successfully")


@router.post(
    "/{articleId}/related/{relatedArticleId}",
    status_code=201,
    response_model=Envelope,
    dependencies=[
        Depends(authenticate),
        Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.EDITOR)),
    ],
)
@invalidate_cache(ARTICLES_CACHE_PATTERN)
async def add_related_article(
    request: Request,
    validated: Annotated[ValidatedRequest, Depends(validate_request(*RELATED_RULES))],
    service: ArticleServiceDep,
) -> Response:
    relation = await service.add_related(
        uuid.UUID(validated.path["articleId"]),
        uuid.UUID(validated.path["relatedArticleId"]),
    )
    return created_response(relation, "Related article added successfully")
