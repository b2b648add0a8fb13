import math

import pytest

from recipe_search.indexing.builder import IndexBuilder, IndexCategory, build
from recipe_search.search.models import Recipe


def test_build_indexes_every_valid_recipe(sample_index):
    assert len(sample_index) == 7
    assert sample_index.skipped == 0
    assert sample_index.all_ids() == [1, 2, 3, 4, 5, 6, 7]


def test_derived_fields_are_stored(sample_index):
    stir_fry = sample_index.get(1)
    assert stir_fry.time_bucket == "31-60"
    assert stir_fry.difficulty == "easy"
    assert sample_index.get(3).difficulty == "hard"
    assert sample_index.get(5).difficulty == "medium"


def test_title_and_ingredient_postings_are_word_level(sample_index):
    assert sample_index.lookup(IndexCategory.title, "chicken") == {3, 5}
    assert sample_index.lookup(IndexCategory.ingredient, "chicken") == {3, 5}
    assert sample_index.lookup(IndexCategory.ingredient, "rice") == {2, 7}
    assert sample_index.lookup(IndexCategory.ingredient, "peanut") == {2, 7}


def test_category_postings_are_normalised(sample_index):
    assert sample_index.lookup(IndexCategory.cuisine, "thai") == {2, 7}
    assert sample_index.lookup(IndexCategory.diet, "vegetarian") == {2, 4, 6}
    assert sample_index.lookup(IndexCategory.meal_type, "dinner") == {1, 3, 5, 7}
    assert sample_index.lookup(IndexCategory.time_bucket, "0-15") == {4, 6}
    assert sample_index.lookup(IndexCategory.difficulty, "easy") == {1, 2, 4, 6}


def test_unknown_term_has_empty_postings(sample_index):
    assert sample_index.lookup(IndexCategory.title, "lasagna") == frozenset()


def test_idf_over_title_and_ingredients(sample_index):
    stats = sample_index.idf_stats
    assert stats.total_docs == 7
    assert stats.doc_frequency["chicken"] == 2
    assert stats.doc_frequency["peanut"] == 2
    assert stats.idf("tikka") == pytest.approx(math.log(7))
    assert stats.idf("lasagna") == 0.0


def test_malformed_records_are_skipped(sample_corpus):
    corpus = sample_corpus + [
        {"id": 99, "title": ""},
        {"title": "No Id"},
        {"id": 100, "title": "Bad Time", "readyInMinutes": -5},
        {"id": 101, "title": "Blank Ingredient", "extendedIngredients": [{"name": "  "}]},
        "not a recipe",
    ]
    index = build(corpus)
    assert len(index) == 7
    assert index.skipped == 5


def test_duplicate_ids_keep_first_record(sample_corpus):
    duplicate = dict(sample_corpus[0], title="Something Else")
    index = build(sample_corpus + [duplicate])
    assert len(index) == 7
    assert index.skipped == 1
    assert index.get(1).title == "Quick Veggie Stir Fry"


def test_builder_finalizes_once():
    builder = IndexBuilder()
    builder.add(Recipe(id=1, title="Toast"))
    builder.finalize()
    with pytest.raises(RuntimeError):
        builder.finalize()
    with pytest.raises(RuntimeError):
        builder.add(Recipe(id=2, title="Jam"))


def test_finished_index_is_read_only(sample_index):
    with pytest.raises(TypeError):
        sample_index.postings[IndexCategory.title]["lasagna"] = frozenset({1})
    with pytest.raises(TypeError):
        sample_index.idf_stats.doc_frequency["lasagna"] = 1


def test_rebuild_starts_from_empty(sample_corpus):
    small = build(sample_corpus[:2])
    full = build(sample_corpus)
    assert len(small) == 2
    assert len(full) == 7
    assert small.lookup(IndexCategory.title, "chicken") == frozenset()


def test_facets_list_indexed_values(sample_index):
    facets = sample_index.facets()
    assert facets["total_recipes"] == 7
    assert "thai" in facets["cuisines"]
    assert facets["time_buckets"] == ["0-15", "16-30", "31-60", "60+"]
    assert facets["difficulties"] == ["easy", "hard", "medium"]


def test_corpus_supplied_derived_fields_are_recomputed(sample_corpus):
    first, second = sample_corpus[:2]
    index = build([
        dict(first, difficulty="Easy", timeBucket="whenever"),
        dict(second, difficulty="moderate", time_bucket="0-15"),
    ])
    assert len(index) == 2
    assert index.skipped == 0
    assert index.get(1).difficulty == "easy"
    assert index.get(1).time_bucket == "31-60"
    assert index.get(2).time_bucket == "16-30"
