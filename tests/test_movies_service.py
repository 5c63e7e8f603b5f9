import pytest
from fastapi import HTTPException

from categories import repository as categories_repository
from categories import service as categories_service
from movies import schemas, service
from movies.validation import DEFAULT_COVER_URL

from fakes import movie_payload

pytestmark = pytest.mark.anyio


def _movie_in(**kwargs) -> schemas.MovieIn:
    return schemas.MovieIn.model_validate(movie_payload(**kwargs))


async def test_create_assigns_ids_and_mid(pool, store):
    movie = await service.create_movie(pool, _movie_in())

    assert movie.id in store.movies
    assert movie.mid == "f641-8f7c-51"
    assert movie.director.id in store.directors
    assert [c.name for c in movie.categories] == ["Sci-Fi"]
    assert store.movies[movie.id]["mid"] == movie.mid


async def test_create_persists_default_cover(pool, store):
    movie = await service.create_movie(pool, _movie_in(cover=""))
    assert movie.cover == DEFAULT_COVER_URL
    assert store.movies[movie.id]["cover"] == DEFAULT_COVER_URL


async def test_create_ignores_client_supplied_mid(pool):
    payload = _movie_in()
    payload = payload.model_copy(update={"mid": "0000-0000-00"})
    movie = await service.create_movie(pool, payload)
    assert movie.mid == "f641-8f7c-51"


async def test_create_reuses_existing_director(pool, store):
    first = await service.create_movie(pool, _movie_in(title="Inception"))
    second = await service.create_movie(pool, _movie_in(title="Tenet", categories=("Action",)))

    assert first.director.id == second.director.id
    assert len(store.directors) == 1


async def test_create_reuses_existing_category(pool, store):
    first = await service.create_movie(pool, _movie_in(title="Inception", categories=("Sci-Fi",)))
    second = await service.create_movie(pool, _movie_in(title="Interstellar", categories=("Sci-Fi",)))

    assert first.categories[0].id == second.categories[0].id
    assert store.category_names() == {"Sci-Fi"}


async def test_create_links_repeated_category_once(pool, store):
    movie = await service.create_movie(pool, _movie_in(categories=("Drama", "Drama")))
    assert [c.name for c in movie.categories] == ["Drama"]
    assert len(store.movie_categories) == 1


async def test_create_with_empty_title_persists_nothing(pool, store):
    with pytest.raises(HTTPException) as exc_info:
        await service.create_movie(pool, _movie_in(title=""))

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "title is required"
    assert store.is_empty()


async def test_create_failure_rolls_back_every_row(pool, store, monkeypatch):
    async def broken_link(executor, *, movie_id, category_id):
        raise ConnectionResetError("connection reset by peer")

    monkeypatch.setattr(categories_repository, "link_movie_category", broken_link)

    with pytest.raises(ConnectionResetError):
        await service.create_movie(pool, _movie_in(categories=("Sci-Fi", "Thriller")))

    assert store.is_empty()
    assert store.rollbacks == 1


async def test_get_returns_movie_with_categories(pool):
    created = await service.create_movie(pool, _movie_in(categories=("Sci-Fi", "Thriller")))

    movie = await service.get_movie(pool, created.id)

    assert movie.title == "Inception"
    assert movie.director.firstname == "Christopher"
    assert movie.director.lastname == "Nolan"
    assert {c.name for c in movie.categories} == {"Sci-Fi", "Thriller"}


async def test_get_missing_movie_is_404(pool):
    with pytest.raises(HTTPException) as exc_info:
        await service.get_movie(pool, 999)
    assert exc_info.value.status_code == 404


async def test_list_is_ordered_by_title(pool):
    await service.create_movie(pool, _movie_in(title="Tenet"))
    await service.create_movie(pool, _movie_in(title="Dunkirk"))
    await service.create_movie(pool, _movie_in(title="Memento"))

    movies = await service.list_movies(pool)

    assert [m.title for m in movies] == ["Dunkirk", "Memento", "Tenet"]
    assert all(m.categories is not None for m in movies)


async def test_list_when_empty(pool):
    assert await service.list_movies(pool) == []


async def test_update_replaces_categories(pool, store):
    created = await service.create_movie(pool, _movie_in(categories=("A", "B")))

    updated = await service.update_movie(pool, created.id, _movie_in(categories=("C",)))

    assert [c.name for c in updated.categories] == ["C"]
    assert store.category_names_for(created.id) == {"C"}
    fetched = await service.get_movie(pool, created.id)
    assert [c.name for c in fetched.categories] == ["C"]


async def test_update_then_purge_removes_unused_categories(pool, store):
    created = await service.create_movie(pool, _movie_in(categories=("A", "B")))
    await service.update_movie(pool, created.id, _movie_in(categories=("C",)))

    # Still present until the post-commit purge runs.
    assert store.category_names() == {"A", "B", "C"}
    removed = await categories_service.purge_orphaned_categories(pool)

    assert removed == 2
    assert store.category_names() == {"C"}


async def test_update_recomputes_mid(pool):
    created = await service.create_movie(pool, _movie_in(categories=("Sci-Fi",)))
    updated = await service.update_movie(pool, created.id, _movie_in(categories=("Sci-Fi", "Thriller")))

    assert updated.mid == "574d-e6db-4f"
    assert updated.mid != created.mid


async def test_update_missing_movie_is_404_and_rolls_back(pool, store):
    with pytest.raises(HTTPException) as exc_info:
        await service.update_movie(pool, 42, _movie_in(firstname="Denis", lastname="Villeneuve"))

    assert exc_info.value.status_code == 404
    assert store.is_empty()


async def test_update_validation_error(pool, store):
    created = await service.create_movie(pool, _movie_in())

    with pytest.raises(HTTPException) as exc_info:
        await service.update_movie(pool, created.id, _movie_in(lastname=""))

    assert exc_info.value.status_code == 400
    assert store.movies[created.id]["title"] == "Inception"


async def test_update_renaming_director_does_not_touch_shared_director(pool, store):
    inception = await service.create_movie(pool, _movie_in(title="Inception"))
    tenet = await service.create_movie(pool, _movie_in(title="Tenet"))

    payload = _movie_in(title="Tenet", firstname="Chris", lastname="Nolan")
    # A stale or wrong director id in the body is ignored.
    payload.director.id = inception.director.id
    updated = await service.update_movie(pool, tenet.id, payload)

    assert updated.director.id != inception.director.id
    assert (await service.get_movie(pool, inception.id)).director.firstname == "Christopher"
    assert store.director_names() == {("Christopher", "Nolan"), ("Chris", "Nolan")}


async def test_update_removes_director_left_without_movies(pool, store):
    created = await service.create_movie(pool, _movie_in(firstname="Chris", lastname="Nolan"))

    updated = await service.update_movie(pool, created.id, _movie_in(firstname="Christopher", lastname="Nolan"))

    assert store.director_names() == {("Christopher", "Nolan")}
    assert updated.director.id in store.directors


async def test_update_failure_keeps_previous_state(pool, store, monkeypatch):
    created = await service.create_movie(pool, _movie_in(categories=("A", "B")))

    async def broken_link(executor, *, movie_id, category_id):
        raise ConnectionResetError("connection reset by peer")

    monkeypatch.setattr(categories_repository, "link_movie_category", broken_link)

    with pytest.raises(ConnectionResetError):
        await service.update_movie(pool, created.id, _movie_in(title="Changed", categories=("C",)))

    assert store.movies[created.id]["title"] == "Inception"
    assert store.category_names_for(created.id) == {"A", "B"}
    assert "C" not in store.category_names()


async def test_delete_last_movie_removes_director(pool, store):
    created = await service.create_movie(pool, _movie_in())

    result = await service.delete_movie(pool, created.id)

    assert result.message == "Movie deleted successfully"
    assert store.movies == {}
    assert store.directors == {}
    assert store.movie_categories == set()


async def test_delete_keeps_director_shared_with_other_movies(pool, store):
    inception = await service.create_movie(pool, _movie_in(title="Inception"))
    tenet = await service.create_movie(pool, _movie_in(title="Tenet"))

    await service.delete_movie(pool, inception.id)

    assert list(store.movies) == [tenet.id]
    assert list(store.directors) == [tenet.director.id]


async def test_delete_missing_movie_is_404(pool, store):
    kept = await service.create_movie(pool, _movie_in())

    with pytest.raises(HTTPException) as exc_info:
        await service.delete_movie(pool, kept.id + 100)

    assert exc_info.value.status_code == 404
    assert kept.id in store.movies


async def test_delete_then_purge_removes_unused_categories(pool, store):
    inception = await service.create_movie(pool, _movie_in(title="Inception", categories=("Sci-Fi", "Heist")))
    await service.create_movie(pool, _movie_in(title="Interstellar", categories=("Sci-Fi",)))

    await service.delete_movie(pool, inception.id)
    await categories_service.purge_orphaned_categories(pool)

    assert store.category_names() == {"Sci-Fi"}


async def test_search_matches_director_title_and_category(pool):
    await service.create_movie(pool, _movie_in(title="Inception"))
    await service.create_movie(
        pool,
        _movie_in(title="Following the Nolan way", firstname="Someone", lastname="Else", categories=("Drama",)),
    )
    await service.create_movie(
        pool,
        _movie_in(title="Other", firstname="Jane", lastname="Doe", categories=("nolanesque",)),
    )
    await service.create_movie(pool, _movie_in(title="Unrelated", firstname="Jane", lastname="Doe", categories=()))

    movies = await service.search_movies(pool, "Nolan")

    assert [m.title for m in movies] == ["Following the Nolan way", "Inception", "Other"]


async def test_search_returns_each_movie_once(pool):
    await service.create_movie(
        pool,
        _movie_in(title="Heat", firstname="Michael", lastname="Mann", categories=("Crime", "Crime Drama")),
    )

    movies = await service.search_movies(pool, "crime")

    assert len(movies) == 1
    assert {c.name for c in movies[0].categories} == {"Crime", "Crime Drama"}


async def test_search_is_case_insensitive(pool):
    await service.create_movie(pool, _movie_in())
    assert len(await service.search_movies(pool, "iNcEpTiOn")) == 1


@pytest.mark.parametrize("query", ["", "   "])
async def test_empty_search_is_400(pool, query):
    with pytest.raises(HTTPException) as exc_info:
        await service.search_movies(pool, query)
    assert exc_info.value.status_code == 400


async def test_list_by_category_does_not_attach_categories(pool, store):
    inception = await service.create_movie(pool, _movie_in(title="Inception", categories=("Sci-Fi",)))
    await service.create_movie(pool, _movie_in(title="Heat", firstname="Michael", lastname="Mann", categories=("Crime",)))

    category_id = inception.categories[0].id
    movies = await service.list_movies_by_category(pool, category_id)

    assert [m.id for m in movies] == [inception.id]
    assert movies[0].categories is None
