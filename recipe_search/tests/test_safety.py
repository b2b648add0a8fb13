import pytest

from recipe_search.search.safety import (
    exclude_allergens,
    forms_overlap,
    ingredient_forms,
    pantry_form,
)

ALL_IDS = [1, 2, 3, 4, 5, 6, 7]


def test_ingredient_forms_include_raw_and_normalised():
    assert ingredient_forms("Crushed Peanuts") == {"crushed peanuts", "peanut"}
    assert ingredient_forms("  ") == frozenset()
    assert ingredient_forms("x") == frozenset()


def test_forms_overlap_either_direction():
    assert forms_overlap(ingredient_forms("peanut butter"), ingredient_forms("peanut"))
    assert forms_overlap(ingredient_forms("nut"), ingredient_forms("peanut butter"))
    assert not forms_overlap(ingredient_forms("shrimp"), ingredient_forms("peanut"))


def test_peanut_allergy_removes_every_peanut_recipe(sample_index):
    assert exclude_allergens(sample_index, ALL_IDS, ["peanut"]) == [1, 3, 4, 5, 6]
    assert exclude_allergens(sample_index, ALL_IDS, ["Peanuts"]) == [1, 3, 4, 5, 6]


def test_ingredient_contained_in_allergen_phrase(sample_index):
    assert exclude_allergens(sample_index, ALL_IDS, ["sesame oil dressing"]) == [2, 3, 4, 5, 6, 7]


def test_modifier_only_allergen_matches_exact_ingredient(sample_index):
    assert exclude_allergens(sample_index, ALL_IDS, ["salt"]) == [1, 2, 3, 5, 6, 7]


@pytest.mark.parametrize("allergens", [[], ["", "   "], ["*", "a"]])
def test_blank_allergens_remove_nothing(sample_index, allergens):
    assert exclude_allergens(sample_index, ALL_IDS, allergens) == ALL_IDS


def test_more_allergens_never_grow_results(sample_index):
    allergens: list[str] = []
    previous = set(exclude_allergens(sample_index, ALL_IDS, allergens))
    for allergen in ["peanut", "egg", "garlic", "olive oil"]:
        allergens.append(allergen)
        current = set(exclude_allergens(sample_index, ALL_IDS, allergens))
        assert current <= previous
        previous = current
    assert previous == set()


def test_order_is_preserved(sample_index):
    assert exclude_allergens(sample_index, [7, 6, 5, 4, 3], ["egg"]) == [6, 5]


def test_pantry_form_ignores_cooking_modifiers():
    assert pantry_form("Boiled Eggs") == {"egg"}
    assert pantry_form("salt") == {"salt"}
    assert pantry_form("  ") == frozenset()
    assert not forms_overlap(pantry_form("oil"), pantry_form("boiled eggs"))


def test_allergen_check_still_uses_raw_text():
    assert forms_overlap(ingredient_forms("oil"), ingredient_forms("boiled eggs"))
