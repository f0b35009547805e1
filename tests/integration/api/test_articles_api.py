"""Integration tests for the /articles endpoints, including response caching."""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from httpx import AsyncClient
from pytest_mock import MockerFixture

from mutuals.api.cache import CACHE_STATUS_HEADER, ResponseCache
from mutuals.domain.articles import ArticleService

API = "/api/v1"

ArticleFactory = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
async def editor(auth_headers: Callable[..., Awaitable[dict[str, str]]]) -> dict[str, str]:
    return await auth_headers("EDITOR")


@pytest.fixture
def create_article(client: AsyncClient, editor: dict[str, str]) -> ArticleFactory:
    """Create an article through the API; published unless told otherwise."""

    async def _create(**overrides: Any) -> dict[str, Any]:  # noqa: ANN401
        body = {
            "title": "Rising Artists of the Year",
            "content": "A long read about the people to watch.",
            "category": "music",
            "status": "PUBLISHED",
            **overrides,
        }
        response = await client.post(f"{API}/articles", json=body, headers=editor)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.mark.integration
class TestCreateArticle:
    """Test suite for POST /articles."""

    async def test_create_returns_article_with_author(
        self, create_article: ArticleFactory
    ) -> None:
        """Test that a created article carries its slug, defaults and author."""
        article = await create_article(
            title="  Hello, World!  ",
            tags=["music", 2024],
            heroMediaUrl="https://cdn.example.com/hero.jpg",
            heroMediaType="IMAGE",
            publishDate="2024-05-01T10:00:00+00:00",
        )

        assert article["title"] == "Hello, World!"
        assert article["slug"] == "hello-world"
        assert article["tags"] == ["music", "2024"]
        assert article["featured"] is False
        assert article["viewCount"] == 0
        assert article["author"]["firstName"] == "Test"
        assert article["heroMediaType"] == "IMAGE"

    async def test_duplicate_titles_get_numbered_slugs(
        self, create_article: ArticleFactory
    ) -> None:
        """Test that slugs stay unique across articles with the same title."""
        first = await create_article(title="Same Title")
        second = await create_article(title="Same Title")
        third = await create_article(title="Same Title")

        assert [first["slug"], second["slug"], third["slug"]] == [
            "same-title",
            "same-title-1",
            "same-title-2",
        ]

    async def test_missing_fields_are_rejected_and_nothing_is_saved(
        self, client: AsyncClient, editor: dict[str, str]
    ) -> None:
        """Test that an invalid body never reaches the database."""
        # Act
        response = await client.post(
            f"{API}/articles",
            json={"content": "Body only", "heroMediaUrl": "not a url"},
            headers=editor,
        )

        # Assert
        assert response.status_code == 400
        assert response.json()["data"] == [
            {"field": "title", "message": "Title is required"},
            {"field": "category", "message": "Category is required"},
            {"field": "heroMediaUrl", "message": "Hero media URL must be a valid URL"},
        ]
        listing = await client.get(f"{API}/articles", params={"status": "DRAFT"})
        assert listing.json()["meta"]["total"] == 0

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        """Test that anonymous writes are refused before validation."""
        response = await client.post(f"{API}/articles", json={})

        assert response.status_code == 401
        assert response.json()["message"] == "No token provided"

    async def test_contributors_may_create(
        self,
        client: AsyncClient,
        auth_headers: Callable[..., Awaitable[dict[str, str]]],
    ) -> None:
        """Test that every editorial role, contributors included, can create."""
        headers = await auth_headers("CONTRIBUTOR")

        response = await client.post(
            f"{API}/articles",
            json={"title": "Guest Post", "content": "Words", "category": "culture"},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "DRAFT"


@pytest.mark.integration
class TestReadArticles:
    """Test suite for the public read endpoints."""

    async def test_list_only_shows_published_newest_first(
        self, client: AsyncClient, create_article: ArticleFactory
    ) -> None:
        """Test the default listing filter and ordering."""
        await create_article(title="Old", publishDate="2023-01-01T00:00:00+00:00")
        await create_article(title="New", publishDate="2024-01-01T00:00:00+00:00")
        await create_article(title="Draft", status="DRAFT")

        response = await client.get(f"{API}/articles")

        body = response.json()
        assert response.status_code == 200
        assert [a["title"] for a in body["data"]] == ["New", "Old"]
        assert body["meta"] == {"total": 2, "page": 1, "limit": 10, "totalPages": 1}

    async def test_list_filters(
        self, client: AsyncClient, create_article: ArticleFactory
    ) -> None:
        """Test category, featured and search filters."""
        await create_article(title="Night Shift", category="music", featured=True)
        await create_article(title="Studio Visit", category="art")
        await create_article(title="Deep Cuts", category="music", content="night vibes")

        music = await client.get(f"{API}/articles", params={"category": "music"})
        featured = await client.get(f"{API}/articles", params={"featured": "true"})
        search = await client.get(f"{API}/articles", params={"search": "NIGHT"})

        assert music.json()["meta"]["total"] == 2
        assert [a["title"] for a in featured.json()["data"]] == ["Night Shift"]
        assert {a["title"] for a in search.json()["data"]} == {"Night Shift", "Deep Cuts"}

    async def test_list_pagination(
        self, client: AsyncClient, create_article: ArticleFactory
    ) -> None:
        """Test page and limit handling."""
        for i in range(3):
            await create_article(title=f"Piece {i}")

        response = await client.get(f"{API}/articles", params={"page": "2", "limit": "2"})

        body = response.json()
        assert len(body["data"]) == 1
        assert body["meta"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}

    async def test_invalid_query_values(self, client: AsyncClient) -> None:
        """Test that bad filter values are validation errors."""
        response = await client.get(
            f"{API}/articles", params={"featured": "maybe", "status": "LIVE"}
        )

        assert response.status_code == 400
        assert response.json()["data"] == [
            {"field": "status", "message": "Invalid status"},
            {"field": "featured", "message": "Featured must be a boolean"},
        ]

    async def test_featured_and_category_routes(
        self, client: AsyncClient, create_article: ArticleFactory
    ) -> None:
        """Test the featured and category listings."""
        await create_article(title="Cover Story", category="fashion", featured=True)
        await create_article(title="Side Note", category="fashion")

        featured = await client.get(f"{API}/articles/featured")
        category = await client.get(f"{API}/articles/category/fashion")

        assert [a["title"] for a in featured.json()["data"]] == ["Cover Story"]
        assert category.json()["meta"]["total"] == 2

    async def test_get_by_slug_counts_views(
        self, client: AsyncClient, create_article: ArticleFactory
    ) -> None:
        """Test that the article page includes relations and bumps views."""
        article = await create_article(title="Counted")

        page = await client.get(f"{API}/articles/counted")
        by_id = await client.get(f"{API}/articles/id/{article['id']}")

        assert page.status_code == 200
        assert page.json()["data"]["relatedArticles"] == []
        assert page.json()["data"]["viewCount"] == 0
        assert by_id.json()["data"]["viewCount"] == 1

    async def test_unknown_article(self, client: AsyncClient) -> None:
        """Test 404s for unknown slugs and ids, and 400 for malformed ids."""
        by_slug = await client.get(f"{API}/articles/no-such-article")
        by_id = await client.get(
            f"{API}/articles/id/4f0c1f8e-8d1b-4a7c-9a36-2f1d7c2b6e11"
        )
        malformed = await client.get(f"{API}/articles/id/123")

        assert by_slug.status_code == 404
        assert by_slug.json()["message"] == "Article not found"
        assert by_id.status_code == 404
        assert malformed.status_code == 400
        assert malformed.json()["data"] == [
            {"field": "id", "message": "Invalid article ID"}
        ]


@pytest.mark.integration
class TestArticleCache:
    """Test suite for cached article reads."""

    async def test_repeat_read_is_served_from_cache(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        mocker: MockerFixture,
    ) -> None:
        """Test that the second identical GET replays the first byte for byte."""
        # Arrange
        await create_article(title="Cached")
        spy = mocker.spy(ArticleService, "list_articles")

        # Act
        first = await client.get(f"{API}/articles?page=1")
        second = await client.get(f"{API}/articles?page=1")

        # Assert
        assert first.headers[CACHE_STATUS_HEADER] == "MISS"
        assert second.headers[CACHE_STATUS_HEADER] == "HIT"
        assert second.content == first.content
        assert spy.call_count == 1

    async def test_query_string_is_part_of_the_key(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        mocker: MockerFixture,
    ) -> None:
        """Test that different query strings are cached separately."""
        await create_article(title="Cached")
        spy = mocker.spy(ArticleService, "list_articles")

        await client.get(f"{API}/articles?page=1")
        other = await client.get(f"{API}/articles?page=2")

        assert other.headers[CACHE_STATUS_HEADER] == "MISS"
        assert spy.call_count == 2

    async def test_write_invalidates_cached_listings(
        self, client: AsyncClient, create_article: ArticleFactory
    ) -> None:
        """Test that a successful write makes the next read fresh."""
        # Arrange
        await create_article(title="First")
        before = await client.get(f"{API}/articles")
        assert before.json()["meta"]["total"] == 1

        # Act
        await create_article(title="Second")
        after = await client.get(f"{API}/articles")

        # Assert
        assert after.headers[CACHE_STATUS_HEADER] == "MISS"
        assert after.json()["meta"]["total"] == 2

    async def test_read_racing_the_purge_sees_committed_rows(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        mocker: MockerFixture,
    ) -> None:
        """Test that a read landing right after the purge cannot re-cache stale rows."""
        # Arrange
        await create_article(title="First")
        await client.get(f"{API}/articles")
        purge = ResponseCache.invalidate
        racing_totals: list[int] = []

        async def purge_then_read(self: ResponseCache, *patterns: str) -> int:
            removed = await purge(self, *patterns)
            racing = await client.get(f"{API}/articles")
            racing_totals.append(racing.json()["meta"]["total"])
            return removed

        mocker.patch.object(ResponseCache, "invalidate", new=purge_then_read)

        # Act
        await create_article(title="Second")
        after = await client.get(f"{API}/articles")

        # Assert
        assert racing_totals == [2]
        assert after.json()["meta"]["total"] == 2

    async def test_failed_write_keeps_cache(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        editor: dict[str, str],
    ) -> None:
        """Test that rejected writes do not purge cached responses."""
        await create_article(title="First")
        await client.get(f"{API}/articles")

        rejected = await client.post(f"{API}/articles", json={}, headers=editor)
        again = await client.get(f"{API}/articles")

        assert rejected.status_code == 400
        assert again.headers[CACHE_STATUS_HEADER] == "HIT"

    async def test_error_responses_are_not_cached(self, client: AsyncClient) -> None:
        """Test that a 404 is computed again on the next request."""
        await client.get(f"{API}/articles/missing")
        again = await client.get(f"{API}/articles/missing")

        assert again.status_code == 404
        assert CACHE_STATUS_HEADER not in again.headers


@pytest.mark.integration
class TestUpdateAndDeleteArticle:
    """Test suite for PUT and DELETE /articles/{id}."""

    async def test_title_change_regenerates_slug(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        editor: dict[str, str],
    ) -> None:
        """Test that renaming an article moves its slug."""
        article = await create_article(title="Working Title")

        response = await client.put(
            f"{API}/articles/{article['id']}",
            json={"title": "Final Title", "featured": True},
            headers=editor,
        )

        updated = response.json()["data"]
        assert response.status_code == 200
        assert updated["slug"] == "final-title"
        assert updated["featured"] is True
        assert updated["content"] == article["content"]

    async def test_same_title_keeps_slug(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        editor: dict[str, str],
    ) -> None:
        """Test that an unchanged title does not pick up a numbered slug."""
        article = await create_article(title="Stable")

        response = await client.put(
            f"{API}/articles/{article['id']}",
            json={"title": "Stable", "excerpt": "Short"},
            headers=editor,
        )

        assert response.json()["data"]["slug"] == "stable"

    async def test_blank_title_is_rejected(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        editor: dict[str, str],
    ) -> None:
        """Test that updates cannot blank out required fields."""
        article = await create_article()

        response = await client.put(
            f"{API}/articles/{article['id']}", json={"title": "   "}, headers=editor
        )

        assert response.status_code == 400
        assert response.json()["data"] == [
            {"field": "title", "message": "Title cannot be empty"}
        ]

    async def test_contributor_cannot_update(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        auth_headers: Callable[..., Awaitable[dict[str, str]]],
    ) -> None:
        """Test that contributors are limited to creating articles."""
        article = await create_article()
        contributor = await auth_headers("CONTRIBUTOR")

        response = await client.put(
            f"{API}/articles/{article['id']}", json={"title": "Hijack"}, headers=contributor
        )

        assert response.status_code == 403

    async def test_admin_deletes_article(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        auth_headers: Callable[..., Awaitable[dict[str, str]]],
        editor: dict[str, str],
    ) -> None:
        """Test that only admins delete, and the article is gone afterwards."""
        article = await create_article()
        admin = await auth_headers("ADMIN")

        forbidden = await client.delete(f"{API}/articles/{article['id']}", headers=editor)
        deleted = await client.delete(f"{API}/articles/{article['id']}", headers=admin)
        missing = await client.get(f"{API}/articles/id/{article['id']}")

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert deleted.json()["data"] == {"message": "Article deleted successfully"}
        assert missing.status_code == 404


@pytest.mark.integration
class TestRelatedArticles:
    """Test suite for POST /articles/{articleId}/related/{relatedArticleId}."""

    async def test_link_and_read_back(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        editor: dict[str, str],
    ) -> None:
        """Test that a relation shows up on the article page."""
        # Arrange
        main = await create_article(title="Main Story")
        extra = await create_article(title="See Also", excerpt="More to read")

        # Act
        linked = await client.post(
            f"{API}/articles/{main['id']}/related/{extra['id']}", headers=editor
        )
        duplicate = await client.post(
            f"{API}/articles/{main['id']}/related/{extra['id']}", headers=editor
        )
        page = await client.get(f"{API}/articles/main-story")

        # Assert
        assert linked.status_code == 201
        assert linked.json()["data"]["relatedArticleId"] == extra["id"]
        assert duplicate.status_code == 400
        assert duplicate.json()["message"] == "Relation already exists"
        related = page.json()["data"]["relatedArticles"]
        assert len(related) == 1
        assert related[0]["relatedArticle"]["title"] == "See Also"
        assert related[0]["relatedArticle"]["excerpt"] == "More to read"

    async def test_unknown_article_cannot_be_linked(
        self,
        client: AsyncClient,
        create_article: ArticleFactory,
        editor: dict[str, str],
    ) -> None:
        """Test that both ends of a relation must exist."""
        main = await create_article()

        response = await client.post(
            f"{API}/articles/{main['id']}/related/4f0c1f8e-8d1b-4a7c-9a36-2f1d7c2b6e11",
            headers=editor,
        )

        assert response.status_code == 404
        assert response.json()["message"] == "One or both articles not found"
