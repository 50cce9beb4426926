"""Integration tests for routes."""

from escapade.engine.minigames import LockpickMiniGame


def test_home_page(client):
    """Home page is accessible without certificate."""
    response = client.get("/")
    assert response.is_success
    assert "Crypt Escape" in response.body


def test_help_page(client):
    response = client.get("/help")
    assert response.is_success
    assert "pickup <id>" in response.body


def test_about_page(client):
    response = client.get("/about")
    assert response.is_success
    assert "Escapade" in response.body


def test_play_requires_cert(client):
    """Play page requires a client certificate."""
    response = client.get("/play")
    assert response.is_certificate_required


def test_play_with_cert(auth_client):
    response = auth_client.get("/play")
    assert response.is_success
    assert "== Crypt ==" in response.body
    assert "You awake in a crypt..." in response.body


def test_go_unknown_exit(auth_client):
    """Movement links go through the dispatcher and cost a turn."""
    response = auth_client.get("/go/north")
    assert response.is_success
    assert "You cannot go via" in response.body
    assert "Turns: 1 / 50" in response.body


def test_cmd_input_prompt(auth_client):
    response = auth_client.get("/cmd")
    assert response.is_input_required


def test_cmd_with_input(auth_client):
    response = auth_client.get_input("/cmd", "use @long with obj_coffin")
    assert response.is_success
    assert "You pry open the coffin." in response.body
    assert "/go/passage" in response.body


def test_look_route(auth_client):
    response = auth_client.get("/look")
    assert response.is_success
    assert "Turns: 0 / 50" in response.body


def test_inventory_route(auth_client):
    response = auth_client.get("/inventory")
    assert response.is_success
    assert "not carrying anything" in response.body

    auth_client.get_input("/cmd", "pickup obj_pole")
    response = auth_client.get("/inventory")
    assert "You are currently holding:" in response.body
    assert "Pole (obj_pole)" in response.body


def test_minigame_over_requests(auth_client):
    code = LockpickMiniGame("lockpick_crypt").secret_code()
    response = auth_client.get_input("/cmd", "use obj_locked_chest with @lockpick")
    assert "Try 1/5:" in response.body
    assert "/answer" in response.body

    response = auth_client.get_input("/cmd", "inv")
    assert "Finish the current challenge first." in response.body

    response = auth_client.get_input("/answer", code)
    assert "the chest is now open" in response.body


def test_answer_without_question(auth_client):
    response = auth_client.get_input("/answer", "123")
    assert response.is_success
    assert "Nothing is waiting for an answer." in response.body


def test_history_route(auth_client):
    response = auth_client.get("/history")
    assert response.is_success


def test_new_game_prompt(auth_client):
    response = auth_client.get("/new")
    assert response.is_input_required


def test_new_game_confirmed(auth_client):
    auth_client.get_input("/cmd", "pickup obj_pole")
    response = auth_client.get_input("/new", "YES")
    assert response.is_success
    assert "A new adventure begins!" in response.body
    assert "Turns: 0 / 50" in response.body

    response = auth_client.get("/history")
    assert "abandoned" in response.body
