import copy

import pytest
from fastapi.testclient import TestClient

from recipe_search.app import app, index_dependency, profile_dependency
from recipe_search.indexing.builder import build
from recipe_search.profiles.provider import InMemoryProfileProvider
from recipe_search.search.models import UserProfile


def _ingredients(*names):
    return [{"id": i, "name": name, "amount": 1.0, "unit": ""} for i, name in enumerate(names, 1)]


# Spoonacular-shaped records, camelCase as they arrive from the corpus snapshot.
SAMPLE_CORPUS = [
    {
        "id": 1,
        "title": "Quick Veggie Stir Fry",
        "readyInMinutes": 45,
        "cuisines": ["Chinese", "Asian"],
        "diets": ["vegan", "gluten free"],
        "dishTypes": ["main course", "dinner"],
        "extendedIngredients": _ingredients(
            "broccoli", "carrots", "soy sauce", "garlic", "ginger", "sesame oil"
        ),
    },
    {
        "id": 2,
        "title": "Peanut Butter Noodles",
        "readyInMinutes": 20,
        "cuisines": ["Thai"],
        "diets": ["lacto ovo vegetarian"],
        "dishTypes": ["lunch", "main course"],
        "extendedIngredients": _ingredients(
            "peanut butter", "rice noodles", "soy sauce", "lime", "chopped cilantro"
        ),
    },
    {
        "id": 3,
        "title": "Classic Chicken Parmesan",
        "readyInMinutes": 75,
        "cuisines": ["Italian"],
        "diets": [],
        "dishTypes": ["dinner", "main course"],
        "extendedIngredients": _ingredients(
            "boneless skinless chicken breasts", "breadcrumbs", "parmesan cheese",
            "marinara sauce", "mozzarella", "eggs", "flour", "olive oil",
        ),
    },
    {
        "id": 4,
        "title": "Fluffy Pancakes",
        "readyInMinutes": 15,
        "cuisines": ["American"],
        "diets": ["vegetarian"],
        "dishTypes": ["breakfast", "morning meal"],
        "extendedIngredients": _ingredients(
            "flour", "milk", "eggs", "sugar", "baking powder", "salt"
        ),
    },
    {
        "id": 5,
        "title": "Chicken Tikka Masala",
        "readyInMinutes": 50,
        "cuisines": ["Indian"],
        "diets": ["gluten free"],
        "dishTypes": ["dinner", "main course"],
        "extendedIngredients": _ingredients(
            "chicken thighs", "yogurt", "garam masala", "tomatoes", "heavy cream",
            "onion", "garlic", "ginger", "butter", "fresh cilantro",
        ),
    },
    {
        "id": 6,
        "title": "Greek Salad",
        "readyInMinutes": 10,
        "cuisines": ["Greek", "Mediterranean"],
        "diets": ["gluten free", "vegetarian"],
        "dishTypes": ["salad", "side dish", "lunch"],
        "extendedIngredients": _ingredients(
            "cucumber", "tomatoes", "red onion", "feta cheese", "kalamata olives", "olive oil"
        ),
    },
    {
        "id": 7,
        "title": "Shrimp Pad Thai",
        "readyInMinutes": 30,
        "cuisines": ["Thai", "Asian"],
        "diets": [],
        "dishTypes": ["dinner", "main course"],
        "extendedIngredients": _ingredients(
            "shrimp", "rice noodles", "crushed peanuts", "eggs", "fish sauce",
            "bean sprouts", "lime", "green onions",
        ),
    },
]


@pytest.fixture
def sample_corpus():
    return copy.deepcopy(SAMPLE_CORPUS)


@pytest.fixture
def sample_index(sample_corpus):
    return build(sample_corpus)


@pytest.fixture
def profile_provider():
    return InMemoryProfileProvider({
        1: UserProfile(allergies=["peanut"]),
        2: UserProfile(ingredients=["chicken"]),
    })


@pytest.fixture
def client(sample_index, profile_provider):
    app.dependency_overrides[index_dependency] = lambda: sample_index
    app.dependency_overrides[profile_dependency] = lambda: profile_provider
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
