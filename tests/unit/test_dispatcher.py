import json

import pytest

from forum_api.app.core.errors import StorageError


def call(dispatcher, action, body=None):
    return dispatcher.dispatch({"action": action, "body": body or {}}).to_wire()


@pytest.fixture
def forum(dispatcher):
    call(dispatcher, "user/create", {"userName": "admin", "password": "pw", "role": "ADMIN"})
    call(dispatcher, "user/create", {"userName": "alice", "password": "pw"})
    call(dispatcher, "user/create", {"userName": "bob", "password": "pw"})
    return dispatcher


def test_handle_raw_returns_one_json_line(dispatcher):
    raw = dispatcher.handle_raw(b'{"action": "post/get-all", "body": {}}')
    assert raw.endswith(b"\n")
    assert raw.count(b"\n") == 1
    assert json.loads(raw) == {"status": 200, "body": {"result": []}}


@pytest.mark.parametrize("data", [b"{not json", b"\xff\xfe", b""])
def test_malformed_json(dispatcher, data):
    response = dispatcher.handle_bytes(data)
    assert response.status == 400
    assert response.body["error"] == "Malformed JSON request."


@pytest.mark.parametrize("payload", [[], "post/get-all", {"body": {}}, {"action": 5}])
def test_invalid_envelope(dispatcher, payload):
    response = dispatcher.dispatch(payload)
    assert response.status == 400
    assert response.body["error"] == "Invalid request envelope."


@pytest.mark.parametrize("action", ["post", "post/", "/get", "post/get/extra", "post get", ""])
def test_bad_action_format(dispatcher, action):
    assert call(dispatcher, action)["body"] == {"error": "Invalid action format."}


def test_unknown_resource_and_verb(dispatcher):
    assert call(dispatcher, "topic/get")["body"]["error"] == "Unknown resource: topic"
    assert call(dispatcher, "post/delete")["body"]["error"] == "Unknown action for post resource."


def test_action_is_case_insensitive(forum):
    assert call(forum, "POST/Get-All")["status"] == 200


def test_invalid_body_lists_problems(dispatcher):
    wire = call(dispatcher, "post/get", {"postId": "abc"})
    assert wire["status"] == 400
    assert wire["body"]["error"] == "Invalid request message for post."
    assert wire["body"]["details"][0]["loc"] == ["postId"]
    json.dumps(wire)

    missing = call(dispatcher, "comment/create", {"userName": "a"})
    assert missing["status"] == 400
    assert {tuple(d["loc"]) for d in missing["body"]["details"]} == {("postId",), ("content",)}


def test_user_actions(forum):
    assert call(forum, "user/create", {"userName": "alice", "password": "x"})["body"] == {"result": False}
    assert call(forum, "user/authenticate", {"userName": "alice", "password": "pw"})["body"] == {"result": True}
    assert call(forum, "user/authenticate", {"userName": "alice", "password": "no"})["body"] == {"result": False}

    got = call(forum, "user/get", {"userName": "admin", "password": "pw"})
    assert got == {"status": 200, "body": {"result": {"username": "admin", "role": "ADMIN"}}}
    assert call(forum, "user/get", {"userName": "admin", "password": "no"}) == {
        "status": 404,
        "body": {"error": "User Not Found"},
    }

    edit = {"editorName": "admin", "userName": "bob", "oldPassword": "", "newPassword": "n", "newRole": "moderator"}
    assert call(forum, "user/edit", edit)["body"]["result"] is True
    assert call(forum, "user/get", {"userName": "bob", "password": "n"})["body"]["result"]["role"] == "MODERATOR"

    remove = {"removerName": "alice", "userName": "alice", "password": "pw"}
    assert call(forum, "user/remove", remove)["body"]["result"] is True


def test_post_and_comment_flow(forum):
    created = call(forum, "post/create", {"title": "Hello", "userName": "alice", "content": "First test"})
    assert created["status"] == 200
    assert created["body"]["result"] == "Post created successfully"
    post_id = created["body"]["id"]

    post = call(forum, "post/get", {"postId": str(post_id)})["body"]["result"]
    assert set(post) == {"id", "title", "userName", "content", "timestamp", "isEdited"}
    assert post["userName"] == "alice"

    comment = call(forum, "comment/create", {"postId": post_id, "userName": "bob", "content": "a test reply"})
    comment_id = comment["body"]["id"]
    assert comment["body"]["result"] == "Comment created successfully"

    listed = call(forum, "post/get-comments", {"postId": post_id})["body"]["result"]
    assert [c["id"] for c in listed] == [comment_id]
    assert listed[0]["postId"] == post_id

    found = call(forum, "comment/search-contents", {"searchPattern": "TEST"})["body"]["result"]
    assert found["pattern"] == "TEST"
    assert found["matches"][0]["indexes"] == [2]
    assert found["matches"][0]["item"]["id"] == comment_id

    titles = call(forum, "post/search-titles", {"searchPattern": "hello"})["body"]["result"]
    assert [m["item"]["id"] for m in titles["matches"]] == [post_id]
    contents = call(forum, "post/search-contents", {"searchPattern": "nope"})["body"]["result"]
    assert contents == {"pattern": "nope", "matches": []}

    edit = {"commentId": comment_id, "userName": "alice", "content": "stolen"}
    assert call(forum, "comment/edit", edit)["body"]["result"] is False
    edit["userName"] = "bob"
    assert call(forum, "comment/edit", edit)["body"]["result"] is True
    assert call(forum, "comment/get", {"commentId": comment_id})["body"]["result"]["isEdited"] is True

    post_edit = {"postId": post_id, "title": "T", "userName": "bob", "content": "C"}
    assert call(forum, "post/edit", post_edit)["body"]["result"] is False

    assert call(forum, "post/remove", {"postId": post_id, "userName": "bob"})["body"]["result"] is False
    assert call(forum, "post/remove", {"postId": post_id, "userName": "admin"})["body"]["result"] is True
    assert call(forum, "comment/get", {"commentId": comment_id})["status"] == 404
    assert call(forum, "comment/get-all")["body"]["result"] == []
    assert call(forum, "post/get", {"postId": post_id}) == {"status": 404, "body": {"error": "Post Not Found"}}


def test_comment_remove_and_get_all(forum):
    call(forum, "comment/create", {"postId": 1, "userName": "bob", "content": "x"})
    assert len(call(forum, "comment/get-all")["body"]["result"]) == 1
    assert call(forum, "comment/remove", {"commentId": 1, "userName": "alice"})["body"]["result"] is False
    assert call(forum, "comment/remove", {"commentId": "1", "userName": "bob"})["body"]["result"] is True
    assert call(forum, "comment/get", {"commentId": 1})["body"] == {"error": "Comment Not Found"}


def test_storage_failure_becomes_generic_500(forum, monkeypatch):
    def broken():
        raise StorageError("Cannot read snapshot posts.json")

    monkeypatch.setattr(forum.posts, "get_all_posts", broken)
    assert call(forum, "post/get-all") == {"status": 500, "body": {"error": "Internal server error."}}


def test_unexpected_exception_becomes_500(forum, monkeypatch):
    def boom(pattern):
        raise RuntimeError("bug")

    monkeypatch.setattr(forum.comments, "search_contents", boom)
    assert call(forum, "comment/search-contents", {"searchPattern": "x"})["status"] == 500
