import logging

import pytest
import requests

from recipe_builder import BuilderSession, RecipeBuilder
from recipe_draft import RecipeDraft
from recipe_models import Ingredient, InfusionRecipe, ScentProfile
from thermaflow_client import ThermaFlowAPIError

API = "http://backend.test/api"

EUCALYPTUS = Ingredient(id=1, name="Eucalyptus", viscosity=20, scent_profile=ScentProfile.HERBAL,
                        stock_level=900, cost_per_ml=0.10)


def _builder(ingredients=None):
    notices = []
    builder = RecipeBuilder(RecipeDraft(ingredients), API, notify=notices.append)
    return builder, notices


def _filled(builder):
    draft = builder.draft
    draft.name = "Nordic Aurora"
    draft.theme = "Nordic Experience"
    draft.description = "Cold plunge then birch"
    draft.add_step()
    draft.update_step(0, ingredient_id=1)
    return draft


def test_load_ingredients_stores_catalog(monkeypatch):
    monkeypatch.setattr("recipe_builder.list_ingredients", lambda base_url: [EUCALYPTUS])
    builder, _ = _builder()

    builder.load_ingredients()

    assert builder.draft.ingredients == [EUCALYPTUS]


def test_load_ingredients_failure_is_logged_and_list_stays_empty(monkeypatch, caplog):
    def boom(base_url):
        raise requests.ConnectionError("backend down")

    monkeypatch.setattr("recipe_builder.list_ingredients", boom)
    builder, notices = _builder()

    with caplog.at_level(logging.ERROR, logger="recipe_builder"):
        builder.load_ingredients()

    assert builder.draft.ingredients == []
    assert notices == []
    assert "Error loading ingredients" in caplog.text


def test_successful_save_resets_draft(monkeypatch):
    captured = {}

    def fake_create(base_url, recipe):
        captured["recipe"] = recipe
        return InfusionRecipe(name=recipe.name, id=11, steps=recipe.steps,
                              total_duration=300, total_cost=5.0)

    monkeypatch.setattr("recipe_builder.create_recipe", fake_create)
    builder, notices = _builder([EUCALYPTUS])
    _filled(builder)

    saved = builder.save()

    assert saved.id == 11
    assert captured["recipe"].theme == "Nordic Experience"
    assert captured["recipe"].steps[0].ingredient_name == "Eucalyptus"
    assert notices == ['Recipe "Nordic Aurora" saved successfully! Total Duration: 300s Total Cost: $5.00']
    draft = builder.draft
    assert (draft.name, draft.theme, draft.description, draft.steps) == ("", "", "", [])


def test_save_notice_falls_back_to_local_totals(monkeypatch):
    monkeypatch.setattr(
        "recipe_builder.create_recipe",
        lambda base_url, recipe: InfusionRecipe(name=recipe.name, id=12, steps=recipe.steps)
    )
    builder, notices = _builder([EUCALYPTUS])
    _filled(builder)

    builder.save()

    assert notices == ['Recipe "Nordic Aurora" saved successfully! Total Duration: 300s Total Cost: $5.00']


@pytest.mark.parametrize("error", [
    ThermaFlowAPIError(500, "boom"),
    requests.ConnectionError("down"),
    KeyError("name"),
    ValueError("'RESIN' is not a valid ScentProfile"),
])
def test_failed_save_keeps_draft_and_notifies(monkeypatch, error):
    def fake_create(base_url, recipe):
        raise error

    monkeypatch.setattr("recipe_builder.create_recipe", fake_create)
    builder, notices = _builder([EUCALYPTUS])
    draft = _filled(builder)
    before = (draft.name, draft.theme, draft.description, [s.to_payload() for s in draft.steps])

    assert builder.save() is None

    assert notices == ["Error saving recipe. Please try again."]
    assert (draft.name, draft.theme, draft.description, [s.to_payload() for s in draft.steps]) == before


def test_save_is_disabled_for_invalid_draft(monkeypatch):
    def fake_create(base_url, recipe):
        pytest.fail("invalid draft must not be submitted")

    monkeypatch.setattr("recipe_builder.create_recipe", fake_create)
    builder, notices = _builder()
    builder.draft.name = "  "
    builder.draft.add_step()

    assert builder.save_enabled is False
    assert builder.save() is None
    assert notices == []


def test_render_shows_empty_state():
    builder, _ = _builder()
    view = builder.render()

    assert 'No steps added yet. Use "add" to create your first infusion round.' in view
    assert "Total Duration: 0 seconds (0:00)" in view
    assert "Save: disabled" in view


def test_render_ingredients_lists_catalog_or_empty_message():
    builder, _ = _builder()
    assert builder.render_ingredients() == "No ingredients available.\n"

    builder.draft.set_ingredients([EUCALYPTUS])
    assert builder.render_ingredients() == "1. Eucalyptus (HERBAL) - $0.10/ml\n"


def test_session_routes_commands_into_draft():
    builder, _ = _builder([EUCALYPTUS])
    output = []
    session = BuilderSession(builder, output=output.append)

    session.run([
        "name Nordic Aurora",
        "theme Nordic Experience",
        "add",
        "add",
        "set 1 duration 180",
        "set 0 ingredient 1",
        'set 0 name "Warm Up"',
        "set 1 scene DMX_BLUE_SOFT",
        "quit",
        "add",
    ])

    draft = builder.draft
    assert draft.name == "Nordic Aurora"
    assert draft.theme == "Nordic Experience"
    assert len(draft.steps) == 2
    assert draft.steps[0].name == "Warm Up"
    assert draft.steps[1].lighting_scene == "DMX_BLUE_SOFT"
    assert draft.total_duration == 480
    assert output[-1] == "Duration 8:00 | Cost $5.00 | Steps 2 | Save enabled"


def test_session_reports_bad_input_and_keeps_running():
    builder, _ = _builder()
    output = []
    session = BuilderSession(builder, output=output.append)

    assert session.handle("remove x") is True
    assert session.handle("set 0 heat 4") is True
    assert session.handle("frobnicate") is True
    assert session.handle("save") is True

    assert output[0] == 'Error: step order must be a whole number, got "x"'
    assert output[1] == "No step with order 0."
    assert output[2] == 'Error: unknown command "frobnicate", type "help"'
    assert output[3] == "Save is disabled."


def test_session_clears_optional_fields_with_dash():
    builder, _ = _builder([EUCALYPTUS])
    session = BuilderSession(builder, output=lambda line: None)
    session.handle("add")
    session.handle("set 0 ingredient 1")
    session.handle("set 0 track TRACK_001")

    session.handle("set 0 ingredient -")
    session.handle("set 0 track -")

    step = builder.draft.steps[0]
    assert step.ingredient_id is None
    assert step.ingredient_name is None
    assert step.music_track_id is None
